"""ResourcePulse what-if scenario service."""

__version__ = "1.0.0"
