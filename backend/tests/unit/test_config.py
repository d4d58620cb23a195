"""Tests for environment-based configuration."""

from pydantic import ValidationError
import pytest

from regcompat.config import CompatConfig, is_valid_entry_name


class TestCompatConfig:
    """Test configuration defaults and overrides."""

    def test_defaults(self, monkeypatch):
        for name in ["ENVIRONMENT", "LOG_LEVEL", "RUNTIME_NAME", "STRICT_DECODE"]:
            monkeypatch.delenv(f"REGCOMPAT_{name}", raising=False)

        config = CompatConfig()
        assert config.environment == "development"
        assert config.log_level == "WARNING"
        assert config.runtime_name == "julia"
        assert config.strict_decode is True
        assert not config.is_production

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("REGCOMPAT_ENVIRONMENT", "production")
        monkeypatch.setenv("REGCOMPAT_STRICT_DECODE", "false")
        monkeypatch.setenv("REGCOMPAT_RUNTIME_NAME", "python")

        config = CompatConfig()
        assert config.is_production
        assert config.strict_decode is False
        assert config.runtime_name == "python"

    def test_invalid_runtime_name(self):
        with pytest.raises(ValidationError):
            CompatConfig(runtime_name="not valid")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            CompatConfig(environment="staging")


class TestEntryNames:
    """Test dependency name validation."""

    @pytest.mark.parametrize("name", ["DepA", "julia", "CTBase", "_private", "Dep_2"])
    def test_valid(self, name):
        assert is_valid_entry_name(name)

    @pytest.mark.parametrize("name", ["", "2Dep", "bad name", "Dep-A", "Dep.jl"])
    def test_invalid(self, name):
        assert not is_valid_entry_name(name)
