"""Exit codes shared by CLI commands."""

SYSTEM_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 10
DATA_UNAVAILABLE_EXIT_CODE = 20

__all__ = ["DATA_UNAVAILABLE_EXIT_CODE", "SYSTEM_EXIT_CODE", "VALIDATION_EXIT_CODE"]
