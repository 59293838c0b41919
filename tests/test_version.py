"""
Tests for semantic version parsing and ordering.
"""

from unittest.mock import patch

import pytest

from jxl.errors import ParseError
from jxl.version import SemanticVersion, compare_versions, get_semver_version, get_version


class TestParse:
    """Tests for SemanticVersion.parse."""

    def test_parse_release(self):
        v = SemanticVersion.parse("1.2.3")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease == ""
        assert str(v) == "1.2.3"

    def test_parse_strips_v_prefix(self):
        assert str(SemanticVersion.parse("v2.0.1")) == "2.0.1"

    def test_parse_prerelease_and_build(self):
        v = SemanticVersion.parse("1.0.0-rc.1+build.5")
        assert v.prerelease == "rc.1"
        assert v.build == "build.5"
        # Build metadata is not part of the canonical text
        assert str(v) == "1.0.0-rc.1"

    @pytest.mark.parametrize("text", ["", "1.2", "latest", "1.2.3.4", "01.2.3", "1.2.x", "1.0.0-", "1.0.0-a..b", "1.0.0-01"])
    def test_parse_invalid_raises(self, text):
        with pytest.raises(ParseError):
            SemanticVersion.parse(text)

    @pytest.mark.parametrize("text, prerelease", [
        ("1.0.0-SNAPSHOT", "SNAPSHOT"),
        ("v1.27.4-eks-8ccc7ba", "eks-8ccc7ba"),
        ("v1.27.3-gke.100", "gke.100"),
        ("1.0.0-alpha.beta", "alpha.beta"),
        ("1.0.0-x.7.z.92", "x.7.z.92"),
    ])
    def test_parse_any_semver_prerelease(self, text, prerelease):
        assert SemanticVersion.parse(text).prerelease == prerelease


class TestOrdering:
    """Tests for total ordering of versions."""

    def test_release_ordering(self):
        assert SemanticVersion.parse("1.2.0") < SemanticVersion.parse("1.3.0")
        assert SemanticVersion.parse("2.0.0") > SemanticVersion.parse("1.99.99")
        assert SemanticVersion.parse("1.10.0") > SemanticVersion.parse("1.9.0")

    def test_prerelease_before_release(self):
        assert SemanticVersion.parse("1.0.0-alpha") < SemanticVersion.parse("1.0.0-beta")
        assert SemanticVersion.parse("1.0.0-beta") < SemanticVersion.parse("1.0.0")

    def test_numeric_prerelease_before_release(self):
        assert SemanticVersion.parse("1.3.0-1") < SemanticVersion.parse("1.3.0")

    def test_alphanumeric_prerelease_ascii_order(self):
        assert SemanticVersion.parse("1.3.0-alpha") < SemanticVersion.parse("1.3.0-dev")
        assert SemanticVersion.parse("1.0.0-SNAPSHOT") < SemanticVersion.parse("1.0.0-alpha")

    def test_precedence_chain(self):
        chain = [
            "1.0.0-alpha", "1.0.0-alpha.1", "1.0.0-alpha.beta", "1.0.0-beta",
            "1.0.0-beta.2", "1.0.0-beta.11", "1.0.0-rc.1", "1.0.0",
        ]
        parsed = [SemanticVersion.parse(v) for v in chain]
        assert parsed == sorted(reversed(parsed))
        for lower, higher in zip(parsed, parsed[1:]):
            assert lower < higher

    def test_vendor_build_below_required_release(self):
        assert SemanticVersion.parse("v1.27.4-eks-8ccc7ba") < SemanticVersion.parse("1.28.0")
        assert SemanticVersion.parse("v1.27.4-eks-8ccc7ba") < SemanticVersion.parse("1.27.4")

    def test_equality_ignores_prefix_and_build(self):
        assert SemanticVersion.parse("v1.2.0") == SemanticVersion.parse("1.2.0+abc")
        assert SemanticVersion.parse("1.2.0") >= SemanticVersion.parse("1.2.0")

    def test_hashable(self):
        assert len({SemanticVersion.parse("1.2.0"), SemanticVersion.parse("v1.2.0")}) == 1

    def test_compare_versions(self):
        assert compare_versions("1.0.0", "1.0.1") == -1
        assert compare_versions("1.0.1", "1.0.0") == 1
        assert compare_versions("2.5.3", "2.5.3") == 0

    def test_compare_versions_invalid(self):
        with pytest.raises(ParseError):
            compare_versions("nightly", "1.0.0")


class TestRunningVersion:
    """Tests for the embedded jxl version."""

    def test_get_version_matches_package(self):
        import jxl
        assert get_version() == jxl.__version__

    def test_get_semver_version(self):
        with patch("jxl.__version__", "1.4.2"):
            assert get_semver_version() == SemanticVersion.parse("1.4.2")

    def test_get_semver_version_malformed(self):
        with patch("jxl.__version__", "dev-build"):
            with pytest.raises(ParseError, match="getting current jxl version"):
                get_semver_version()
