"""Shared helpers for the example harness."""

from eh_common.api import HarnessError, configure_logging, error_to_payload

__all__ = ["configure_logging", "HarnessError", "error_to_payload"]
