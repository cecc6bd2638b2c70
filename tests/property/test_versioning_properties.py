"""Property-based tests for version parsing and overlap arithmetic."""
from hypothesis import given, settings, strategies as st

from schema_registry_policy.overlap import validate_version_overlap
from schema_registry_policy.versioning import (
    MAJOR_BUMP_DISTANCE,
    SemVer,
    minor_distance,
    parse_version,
    suggest_removal_version,
)

parts = st.integers(min_value=0, max_value=10_000)


@st.composite
def semver(draw):
    """Generate a random SemVer."""
    return SemVer(draw(parts), draw(parts), draw(parts))


class TestParseProperties:
    """Parsing never raises and round-trips."""

    @settings(deadline=None)
    @given(semver(), st.booleans())
    def test_round_trip(self, version, prefixed):
        text = version.tag() if prefixed else str(version)
        assert parse_version(text) == version
        assert parse_version(str(parse_version(text))) == version

    @settings(deadline=None)
    @given(st.text())
    def test_never_raises(self, text):
        result = parse_version(text)
        assert result is None or isinstance(result, SemVer)

    @settings(deadline=None)
    @given(st.text(alphabet="0123456789.v-x", max_size=12))
    def test_accepts_only_three_numeric_parts(self, text):
        result = parse_version(text)
        body = text[1:] if text.startswith("v") else text
        pieces = body.split(".")
        well_formed = len(pieces) == 3 and all(p.isdigit() for p in pieces)
        assert (result is not None) == well_formed


class TestDistanceProperties:
    """Minor distance and suggested removal."""

    @settings(deadline=None)
    @given(semver(), semver())
    def test_distance_cases(self, dep, rem):
        distance = minor_distance(dep.tag(), rem.tag())
        if dep.major == rem.major:
            assert distance == rem.minor - dep.minor
        elif rem.major > dep.major:
            assert distance == MAJOR_BUMP_DISTANCE
        else:
            assert distance is None

    @settings(deadline=None)
    @given(semver(), st.integers(min_value=0, max_value=5))
    def test_suggestion_always_satisfies_policy(self, dep, required):
        suggested = suggest_removal_version(dep.tag(), required)
        result = validate_version_overlap(dep.tag(), suggested, required)
        assert result.valid
        assert result.actual_overlap == required + 1
