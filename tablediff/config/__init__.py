"""Configuration management."""

from .manager import ConfigManager, ComparisonConfig, SourceConfig, OutputConfig, ParserConfig

__all__ = ["ConfigManager", "ComparisonConfig", "SourceConfig", "OutputConfig", "ParserConfig"]
