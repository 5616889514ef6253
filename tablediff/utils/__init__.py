"""Utility functions and helpers."""

from .logger import get_logger, configure_logger, StructuredLogger

__all__ = ["get_logger", "configure_logger", "StructuredLogger"]
