"""Tests for registering versions into compat documents."""

import pytest

from regcompat import RegistrationResult, plan_registration, register_version
from regcompat.core import (
    DocumentError,
    OrderingAmbiguity,
    OverlapInvariantViolation,
    ParseError,
)


class TestRegisterVersion:
    """Test the pure registration entry point."""

    def test_first_version_of_new_package(self, strict_config):
        data = register_version(
            "MainPkg",
            "0.1.0-beta.1",
            {"DepA": "0.1", "DepB": "0.1"},
            None,
            [],
            config=strict_config,
        )
        assert isinstance(data, bytes)
        assert data == b'["*"]\nDepA = "0.1"\nDepB = "0.1"\n'

    def test_second_version_splits_changed_dependency(
        self, strict_config, scenario_a_document
    ):
        first = register_version(
            "MainPkg",
            "0.1.0-beta.1",
            {"DepA": "0.1", "DepB": "0.1", "julia": "1.10"},
            b"",
            [],
            config=strict_config,
        )
        second = register_version(
            "MainPkg",
            "0.1.0-beta.2",
            {"DepA": "0.1, 0.2", "DepB": "0.1", "julia": "1.10"},
            first,
            ["0.1.0-beta.1"],
            config=strict_config,
        )
        assert second.decode("utf-8") == scenario_a_document

    def test_accepts_text_document(self, strict_config, scenario_a_document):
        data = register_version(
            "MainPkg",
            "0.1.0-beta.3",
            {"DepA": "0.1, 0.2", "DepB": "0.1", "julia": "1.10"},
            scenario_a_document,
            ["0.1.0-beta.1", "0.1.0-beta.2"],
            config=strict_config,
        )
        assert data.decode("utf-8") == scenario_a_document


class TestPlanRegistration:
    """Test registration results and error handling."""

    def test_result_fields(self, strict_config, scenario_a_document):
        result = plan_registration(
            "MainPkg",
            "0.2.0",
            {"DepA": "0.2", "DepB": "0.1", "julia": "1.10"},
            scenario_a_document,
            ["0.1.0-beta.1", "0.1.0-beta.2"],
            config=strict_config,
        )
        assert isinstance(result, RegistrationResult)
        assert result.package == "MainPkg"
        assert result.version == "0.2.0"
        assert result.changed
        assert result.versions == ["0.1.0-beta.1", "0.1.0-beta.2", "0.2.0"]
        assert result.section_count == 4
        assert result.repaired == []

    def test_reregistering_same_compat_is_unchanged(
        self, strict_config, scenario_a_document
    ):
        result = plan_registration(
            "MainPkg",
            "0.1.0-beta.2",
            {"DepA": "0.1, 0.2", "DepB": "0.1", "julia": "1.10"},
            scenario_a_document,
            ["0.1.0-beta.1", "0.1.0-beta.2"],
            config=strict_config,
        )
        assert not result.changed
        assert result.document == scenario_a_document

    def test_reregistering_replaces_compat(self, strict_config, scenario_a_document):
        result = plan_registration(
            "MainPkg",
            "0.1.0-beta.2",
            {"DepA": "0.1", "DepB": "0.1", "julia": "1.10"},
            scenario_a_document,
            ["0.1.0-beta.1", "0.1.0-beta.2"],
            config=strict_config,
        )
        assert result.document == (
            '["*"]\nDepA = "0.1"\nDepB = "0.1"\njulia = "1.10-1"\n'
        )

    def test_strict_mode_rejects_overlapping_document(
        self, strict_config, overlapping_document
    ):
        with pytest.raises(OverlapInvariantViolation):
            plan_registration(
                "MainPkg",
                "0.1.0-beta.3",
                {"DepA": "0.1, 0.2", "DepB": "0.1"},
                overlapping_document,
                ["0.1.0-beta.1", "0.1.0-beta.2"],
                config=strict_config,
            )

    def test_repair_mode_fixes_overlapping_document(
        self, repair_config, overlapping_document
    ):
        result = plan_registration(
            "MainPkg",
            "0.1.0-beta.3",
            {"DepA": "0.1, 0.2", "DepB": "0.1"},
            overlapping_document,
            ["0.1.0-beta.1", "0.1.0-beta.2"],
            config=repair_config,
        )
        assert result.document == (
            '["*"]\nDepB = "0.1"\n\n'
            '["0 - 0.1.0-beta.1"]\nDepA = "0.1"\n\n'
            '["0.1.0-beta.2 - *"]\nDepA = "0.1-0.2"\n'
        )
        assert len(result.repaired) == 1
        assert result.repaired[0].startswith("DepA at 0.1.0-beta.2")

    def test_invalid_requirement(self, strict_config):
        with pytest.raises(ParseError) as exc_info:
            plan_registration(
                "MainPkg", "0.1.0", {"DepA": "0.1, nope"}, "", [], config=strict_config
            )
        assert exc_info.value.clause == "nope"

    def test_invalid_version(self, strict_config):
        with pytest.raises(ParseError):
            plan_registration("MainPkg", "0.1", {}, "", [], config=strict_config)

    def test_ambiguous_version(self, strict_config):
        with pytest.raises(OrderingAmbiguity):
            plan_registration(
                "MainPkg", "1.0.0+b", {}, "", ["1.0.0+a"], config=strict_config
            )

    def test_invalid_utf8_document(self, strict_config):
        with pytest.raises(DocumentError):
            plan_registration(
                "MainPkg", "0.1.0", {}, b"\xff\xfe", [], config=strict_config
            )

    def test_invalid_document(self, strict_config):
        with pytest.raises(DocumentError):
            plan_registration(
                "MainPkg", "0.1.0", {}, "not toml [", [], config=strict_config
            )


class TestPersistedHistory:
    """Test that facts stored in the old document are never silently lost."""

    @pytest.fixture
    def release_document(self, strict_config):
        first = plan_registration(
            "MainPkg", "0.1.0", {"DepA": "0.1"}, "", [], config=strict_config
        )
        second = plan_registration(
            "MainPkg",
            "0.2.0",
            {"DepA": "0.2"},
            first.document,
            ["0.1.0"],
            config=strict_config,
        )
        return second.document

    def test_document_without_registered_versions(
        self, strict_config, repair_config, release_document
    ):
        for config in (strict_config, repair_config):
            with pytest.raises(DocumentError) as exc_info:
                plan_registration(
                    "MainPkg",
                    "0.3.0",
                    {"DepA": "0.3"},
                    release_document,
                    [],
                    config=config,
                )
            assert "no registered versions" in str(exc_info.value)

    def test_empty_catch_all_needs_no_versions(self, strict_config):
        result = plan_registration(
            "MainPkg", "0.1.0", {"DepA": "0.1"}, '["*"]\n', [], config=strict_config
        )
        assert result.document == '["*"]\nDepA = "0.1"\n'

    def test_entry_covering_no_registered_version(
        self, strict_config, release_document
    ):
        with pytest.raises(DocumentError) as exc_info:
            plan_registration(
                "MainPkg",
                "0.3.0",
                {"DepA": "0.3"},
                release_document,
                ["0.2.0"],
                config=strict_config,
            )
        assert exc_info.value.clause == "DepA"
        assert "[0-0.1]" in str(exc_info.value)

    def test_repair_reports_dropped_entry(self, repair_config, release_document):
        result = plan_registration(
            "MainPkg",
            "0.3.0",
            {"DepA": "0.3"},
            release_document,
            ["0.2.0"],
            config=repair_config,
        )
        assert result.repaired == [
            "DepA in [0-0.1]: covers no registered version, dropped"
        ]
        assert result.versions == ["0.2.0", "0.3.0"]
