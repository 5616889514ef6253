"""
Configuration management.
Single responsibility: load, validate, and manage comparison configuration.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from ..utils.logger import get_logger, normalize_level


logger = get_logger()


@dataclass
class SourceConfig:
    """Configuration for one side of a comparison."""

    path: str
    encoding: Optional[str] = None
    delimiter: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.path:
            raise ValueError("Source path is required")
        if self.delimiter is not None and len(self.delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character: {self.delimiter!r}")


@dataclass
class ParserConfig:
    """Sampling limits used while parsing."""

    field_sample_size: int = 1000
    delimiter_sample_chars: int = 2000

    def __post_init__(self):
        if self.field_sample_size <= 0:
            raise ValueError("field_sample_size must be positive")
        if self.delimiter_sample_chars <= 0:
            raise ValueError("delimiter_sample_chars must be positive")


@dataclass
class OutputConfig:
    """Where and how the report is written."""

    dir: str = "reports"
    base_name: Optional[str] = None
    show_same: bool = False
    export: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None

    def __post_init__(self):
        self.level = normalize_level(self.level)


@dataclass
class ComparisonConfig:
    """Configuration for one comparison run."""

    left: SourceConfig
    right: SourceConfig
    key: Optional[str] = None
    output: OutputConfig = field(default_factory=OutputConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def report_base_name(self) -> str:
        """Base name of the export, derived from the sources when unset."""
        if self.output.base_name:
            return self.output.base_name
        return f"{Path(self.left.path).stem}_vs_{Path(self.right.path).stem}"


def _source(raw: Any, side: str) -> SourceConfig:
    if isinstance(raw, str):
        return SourceConfig(path=raw)
    if not isinstance(raw, dict):
        raise ValueError(f"'{side}' must be a path or a mapping with 'path'")
    return SourceConfig(
        path=raw.get("path", ""),
        encoding=raw.get("encoding"),
        delimiter=raw.get("delimiter"),
    )


def parse_config(raw: Dict[str, Any]) -> ComparisonConfig:
    """
    Build a ComparisonConfig from a loaded YAML mapping.

    Raises:
        ValueError: If required entries are missing or invalid
    """
    if not isinstance(raw, dict):
        raise ValueError("Configuration must be a mapping")
    for side in ("left", "right"):
        if side not in raw:
            raise ValueError(f"Configuration is missing '{side}'")

    output = raw.get("output") or {}
    parser = raw.get("parser") or {}
    logging_cfg = raw.get("logging") or {}

    return ComparisonConfig(
        left=_source(raw["left"], "left"),
        right=_source(raw["right"], "right"),
        key=raw.get("key"),
        output=OutputConfig(
            dir=output.get("dir", "reports"),
            base_name=output.get("base_name"),
            show_same=bool(output.get("show_same", False)),
            export=bool(output.get("export", True)),
        ),
        parser=ParserConfig(
            field_sample_size=int(parser.get("field_sample_size", 1000)),
            delimiter_sample_chars=int(parser.get("delimiter_sample_chars", 2000)),
        ),
        logging=LoggingConfig(
            level=logging_cfg.get("level", "INFO"),
            file=logging_cfg.get("file"),
        ),
    )


class ConfigManager:
    """
    Manage comparison configuration files.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path or "tablediff.yaml")
        self.raw: Dict[str, Any] = {}
        self.comparison: Optional[ComparisonConfig] = None

    def load(self) -> ComparisonConfig:
        """
        Load configuration from file.

        Returns:
            Parsed comparison configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If config is invalid YAML
            ValueError: If config content is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")

        logger.info("config.loading", file=str(self.config_path))

        with open(self.config_path, encoding="utf-8") as f:
            self.raw = yaml.safe_load(f) or {}

        try:
            self.comparison = parse_config(self.raw)
        except (ValueError, TypeError) as e:
            logger.error("config.invalid", file=str(self.config_path), error=str(e))
            raise

        logger.info("config.loaded",
                   left=self.comparison.left.path,
                   right=self.comparison.right.path,
                   key=self.comparison.key)

        return self.comparison

    def save(self, path: Optional[Path] = None):
        """
        Save configuration to file.

        Args:
            path: Output path (uses original path if not specified)
        """
        if self.comparison is None:
            raise ValueError("Nothing to save: no configuration loaded")

        output_path = Path(path or self.config_path)
        cfg = self.comparison

        config_dict = {
            "left": {"path": cfg.left.path, "encoding": cfg.left.encoding,
                     "delimiter": cfg.left.delimiter},
            "right": {"path": cfg.right.path, "encoding": cfg.right.encoding,
                      "delimiter": cfg.right.delimiter},
            "key": cfg.key,
            "output": {"dir": cfg.output.dir, "base_name": cfg.output.base_name,
                       "show_same": cfg.output.show_same, "export": cfg.output.export},
            "parser": {"field_sample_size": cfg.parser.field_sample_size,
                       "delimiter_sample_chars": cfg.parser.delimiter_sample_chars},
            "logging": {"level": cfg.logging.level, "file": cfg.logging.file},
        }

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info("config.saved", file=str(output_path))


SAMPLE_CONFIG = """# tablediff configuration
# =======================

left:
  path: "data/left.csv"
  encoding: null      # e.g. utf-8, euc-kr, shift_jis, iso-8859-1
  delimiter: null     # detected unless set

right:
  path: "data/right.json"

key: "id"

output:
  dir: "reports"
  base_name: null     # defaults to <left>_vs_<right>
  show_same: false
  export: true

parser:
  field_sample_size: 1000
  delimiter_sample_chars: 2000

logging:
  level: "INFO"
  file: null
"""


def create_sample_config(output_path: Path) -> Path:
    """
    Write a sample configuration file.

    Args:
        output_path: Where to save the config

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    logger.info("config.sample_created", file=str(output_path))
    return output_path
