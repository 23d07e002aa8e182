"""Logging and unexported-changes tracking."""

from archifinance.tracking.gate import MutationGate, get_gate
from archifinance.tracking.logger import configure_logging, get_logger

__all__ = ["MutationGate", "configure_logging", "get_gate", "get_logger"]
