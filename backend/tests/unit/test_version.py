"""Tests for version parsing and precedence."""

import pytest

from regcompat.core import OrderingAmbiguity, ParseError, Version, compare
from regcompat.core.version import ordered_versions


class TestVersionParsing:
    """Test parsing of version strings."""

    def test_parse_release(self):
        version = Version.parse("1.2.3")
        assert version.core == (1, 2, 3)
        assert version.prerelease is None
        assert not version.is_prerelease

    def test_parse_prerelease(self):
        version = Version.parse("0.1.0-beta.2")
        assert version.core == (0, 1, 0)
        assert version.prerelease == ("beta", "2")
        assert version.is_prerelease

    def test_parse_build_metadata(self):
        version = Version.parse("1.2.3-rc.1+build.5")
        assert version.build == "build.5"
        assert str(version) == "1.2.3-rc.1+build.5"

    def test_parse_git_tag_prefix(self):
        assert Version.parse("v0.8.11-beta") == Version.parse("0.8.11-beta")

    @pytest.mark.parametrize(
        "text",
        [
            "1.2",
            "1",
            "01.2.3",
            "1.02.3",
            "1.2.3-01",
            "1.2.3-",
            "1.2.3-beta..1",
            "",
            "a.b.c",
            "١.0.0",
            "1.0.٣",
        ],
    )
    def test_parse_invalid(self, text):
        with pytest.raises(ParseError):
            Version.parse(text)

    def test_parse_non_string(self):
        with pytest.raises(ParseError):
            Version.parse(123)  # type: ignore[arg-type]


class TestVersionOrdering:
    """Test semantic version precedence."""

    def test_prerelease_precedence_chain(self):
        chain = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
        ]
        versions = [Version.parse(text) for text in chain]
        for lower, higher in zip(versions, versions[1:], strict=False):
            assert lower < higher
            assert compare(lower, higher) == -1
            assert compare(higher, lower) == 1

    def test_prerelease_before_its_release_after_previous_release(self):
        assert Version.parse("0.1.0") < Version.parse("0.2.0-beta.1")
        assert Version.parse("0.2.0-beta.1") < Version.parse("0.2.0")

    def test_build_metadata_is_ignored(self):
        a = Version.parse("1.0.0+a")
        b = Version.parse("1.0.0+b")
        assert a == b
        assert compare(a, b) == 0
        assert hash(a) == hash(b)

    def test_floor_sorts_before_prereleases(self):
        floor = Version.parse("0.2.0").floor()
        assert floor.is_floor
        assert not floor.is_prerelease
        assert Version.parse("0.1.9") < floor
        assert floor < Version.parse("0.2.0-alpha")
        assert floor < Version.parse("0.2.0-0")

    def test_release_strips_prerelease(self):
        assert Version.parse("0.2.0-rc.1").release() == Version.parse("0.2.0")


class TestOrderedVersions:
    """Test sorting of registered version lists."""

    def test_sorts_and_collapses_duplicates(self):
        result = ordered_versions(["0.2.0", "0.1.0-beta.2", "0.1.0-beta.1", "0.2.0"])
        assert [str(v) for v in result] == ["0.1.0-beta.1", "0.1.0-beta.2", "0.2.0"]

    def test_accepts_version_objects(self):
        result = ordered_versions([Version.parse("1.0.0"), "0.9.0"])
        assert [str(v) for v in result] == ["0.9.0", "1.0.0"]

    def test_distinct_text_with_same_precedence_is_ambiguous(self):
        with pytest.raises(OrderingAmbiguity) as exc_info:
            ordered_versions(["1.0.0+a", "1.0.0+b"])
        assert exc_info.value.first == "1.0.0+a"
        assert exc_info.value.second == "1.0.0+b"

    def test_invalid_version_raises(self):
        with pytest.raises(ParseError):
            ordered_versions(["0.1.0", "not-a-version"])
