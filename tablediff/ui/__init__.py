"""Console presentation."""

from .console import ResultPrinter, human_size

__all__ = ["ResultPrinter", "human_size"]
