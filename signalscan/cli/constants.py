"""Exit codes shared by CLI commands."""

SYSTEM_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 2
PROVIDER_EXIT_CODE = 3

__all__ = ["SYSTEM_EXIT_CODE", "VALIDATION_EXIT_CODE", "PROVIDER_EXIT_CODE"]
