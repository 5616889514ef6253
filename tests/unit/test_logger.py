"""
Unit tests for the structured logger.
"""

import json
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from tablediff.utils.logger import StructuredLogger, configure_logger, get_logger, normalize_level


class TestStructuredLogger:

    def test_event_and_context_go_to_stderr(self, capsys):
        StructuredLogger("t").info("parser.loaded", rows=3)

        err = capsys.readouterr().err
        assert "INFO  | parser.loaded" in err
        assert "rows=3" in err

    def test_levels_below_threshold_are_dropped(self, capsys):
        logger = StructuredLogger("t", level="WARN")
        logger.info("quiet.event")
        logger.debug("quieter.event")
        logger.warning("loud.event")

        err = capsys.readouterr().err
        assert "quiet.event" not in err
        assert "quieter.event" not in err
        assert "loud.event" in err

    def test_json_lines_file(self, tmp_path, capsys):
        log_file = tmp_path / "run.log"
        logger = StructuredLogger("t", log_file=log_file)

        logger.error("export.failed", reason="disk full")
        logger.info("export.done")

        lines = log_file.read_text(encoding="utf-8").splitlines()
        first = json.loads(lines[0])
        assert len(lines) == 2
        assert first["level"] == "ERROR"
        assert first["message"] == "export.failed"
        assert first["context"] == {"reason": "disk full"}

    def test_is_enabled_for(self):
        logger = StructuredLogger("t", level="INFO")
        assert logger.is_enabled_for("ERROR")
        assert not logger.is_enabled_for("DEBUG")


class TestLevelHandling:

    @pytest.mark.parametrize("raw,expected", [
        ("debug", "DEBUG"),
        ("WARNING", "WARN"),
        (" error ", "ERROR"),
    ])
    def test_normalize_level(self, raw, expected):
        assert normalize_level(raw) == expected

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            normalize_level("verbose")

    def test_configure_updates_shared_instance(self, tmp_path):
        shared = get_logger()
        try:
            configured = configure_logger("ERROR", tmp_path / "x.log")
            assert configured is shared
            assert shared.level == "ERROR"
            assert shared.log_file == tmp_path / "x.log"
        finally:
            configure_logger("INFO")
