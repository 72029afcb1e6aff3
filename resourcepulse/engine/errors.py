"""Errors raised by the what-if scenario engine.

The API layer renders every ``WhatIfError`` as ``{"message", "error"}`` with
the exception's status code.
"""

from typing import Any, Optional


class WhatIfError(Exception):
    """Base error for scenario operations."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ScenarioValidationError(WhatIfError):
    """Missing or invalid input, detected before any write."""

    status_code = 400


class NotFoundError(WhatIfError):
    """A scenario, project, resource or change row does not exist."""

    status_code = 404


class PromotionConflictError(WhatIfError):
    """The scenario was already promoted (or is being promoted concurrently)."""

    status_code = 409
