# What-if scenario engine

from resourcepulse.engine.errors import (
    WhatIfError,
    ScenarioValidationError,
    NotFoundError,
    PromotionConflictError,
)

from resourcepulse.engine.skills import (
    SkillRef,
    SkillInfo,
    parse_skill_refs,
    normalize_skill_refs,
    resolve_skill_ids,
)

from resourcepulse.engine.metrics import (
    AllocationInput,
    ResourceChangeInput,
    TimelineChangeInput,
    build_metrics_document,
    calculate_scenario_metrics,
)

from resourcepulse.engine.comparison import (
    SUPPORTED_METRICS,
    compare_scenarios,
    get_saved_comparison,
    list_saved_comparisons,
)

from resourcepulse.engine.promotion import (
    PromotionResult,
    promote_scenario,
)

__all__ = [
    # Errors
    "WhatIfError",
    "ScenarioValidationError",
    "NotFoundError",
    "PromotionConflictError",
    # Skills
    "SkillRef",
    "SkillInfo",
    "parse_skill_refs",
    "normalize_skill_refs",
    "resolve_skill_ids",
    # Metrics
    "AllocationInput",
    "ResourceChangeInput",
    "TimelineChangeInput",
    "build_metrics_document",
    "calculate_scenario_metrics",
    # Comparison
    "SUPPORTED_METRICS",
    "compare_scenarios",
    "get_saved_comparison",
    "list_saved_comparisons",
    # Promotion
    "PromotionResult",
    "promote_scenario",
]
