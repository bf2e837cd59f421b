"""Runner services."""

from eh_runner.services.results import persist_summary, summary_to_payload

__all__ = ["persist_summary", "summary_to_payload"]
