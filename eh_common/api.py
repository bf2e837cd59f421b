"""Public API surface for eh_common."""

from eh_common.errors import HarnessError, error_to_payload
from eh_common.logging import configure_logging

__all__ = ["configure_logging", "HarnessError", "error_to_payload"]
