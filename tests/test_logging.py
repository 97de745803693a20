"""Tests for log level handling."""

import pytest

from fleetindex.utils.logging import level_from_env, normalize_level


class TestLevelFromEnv:
    """level_from_env()"""

    @pytest.mark.parametrize(
        "value, expected",
        [("warn", "WARNING"), ("WARN", "WARNING"), ("debug", "DEBUG"), (" error ", "ERROR")],
    )
    def test_known_levels(self, value, expected):
        assert level_from_env(value) == expected

    @pytest.mark.parametrize("value", [None, ""])
    def test_unset_is_info(self, value):
        assert level_from_env(value) == "INFO"

    def test_unknown_level_falls_back_to_info(self, capsys):
        """A typo in FLEETINDEX_LOG_LEVEL does not stop the process from starting."""
        assert level_from_env("verbose") == "INFO"

        err = capsys.readouterr().err
        assert "FLEETINDEX_LOG_LEVEL" in err
        assert "verbose" in err


class TestNormalizeLevel:
    """normalize_level()"""

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError, match="unknown log level"):
            normalize_level("loud")
