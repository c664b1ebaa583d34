"""Tests for immutable signal sets."""

import math

import pytest

from modsel_app.errors import InvalidSignalError
from modsel_app.signals import SignalSet, track_override_key


class TestSignalSetConstruction:
    """Test SignalSet validation."""

    def test_accepts_typed_values(self):
        """Booleans, numbers and strings are accepted."""
        signals = SignalSet({"locCount": 500, "ratio": 0.5, "hasWeb": True, "runtime": "asyncio"})

        assert signals["locCount"] == 500
        assert signals["hasWeb"] is True
        assert signals["runtime"] == "asyncio"
        assert len(signals) == 4

    def test_keyword_signals(self):
        """Signals can be passed as keyword arguments."""
        signals = SignalSet(locCount=10)
        assert signals["locCount"] == 10

    def test_rejects_unsupported_value_type(self):
        """Lists, None and other objects are rejected with the offending key."""
        with pytest.raises(InvalidSignalError) as exc_info:
            SignalSet({"libs": ["django"]})

        assert exc_info.value.key == "libs"

        with pytest.raises(InvalidSignalError):
            SignalSet({"missing": None})

    def test_rejects_non_finite_numbers(self):
        """NaN and infinity are rejected."""
        with pytest.raises(InvalidSignalError):
            SignalSet({"ratio": math.nan})
        with pytest.raises(InvalidSignalError):
            SignalSet({"ratio": math.inf})

    def test_rejects_bad_keys(self):
        """Keys must be non-empty strings."""
        with pytest.raises(InvalidSignalError):
            SignalSet({"": 1})
        with pytest.raises(InvalidSignalError):
            SignalSet({3: 1})

    def test_is_read_only(self):
        """Signal sets cannot be mutated."""
        signals = SignalSet({"locCount": 1})

        with pytest.raises(TypeError):
            signals["locCount"] = 2  # type: ignore[index]

    def test_from_mapping_passes_through_signal_sets(self):
        """from_mapping returns existing sets unchanged."""
        signals = SignalSet({"a": 1})
        assert SignalSet.from_mapping(signals) is signals
        assert SignalSet.from_mapping({"a": 1}) == signals


class TestSignalSetEquality:
    """Test structural equality and digests."""

    def test_equal_sets_share_digest(self):
        """Insertion order does not matter."""
        a = SignalSet({"x": 1, "y": "web"})
        b = SignalSet({"y": "web", "x": 1})

        assert a == b
        assert a.digest == b.digest
        assert hash(a) == hash(b)

    def test_bool_and_int_are_distinct(self):
        """True and 1 are different signal values."""
        a = SignalSet({"flag": True})
        b = SignalSet({"flag": 1})

        assert a != b
        assert a.digest != b.digest

    def test_integral_float_equals_int(self):
        """1 and 1.0 are the same number."""
        a = SignalSet({"count": 1})
        b = SignalSet({"count": 1.0})

        assert a == b
        assert a.digest == b.digest

    def test_value_change_changes_digest(self):
        """Any value change produces a new digest."""
        a = SignalSet({"locCount": 500})
        b = SignalSet({"locCount": 501})

        assert a.digest != b.digest

    def test_digest_is_hex_sha256(self):
        """Digest is a 64 character hex string."""
        digest = SignalSet({"a": 1}).digest
        assert len(digest) == 64
        int(digest, 16)


class TestSignalSetDerivation:
    """Test copy-on-write helpers."""

    def test_with_signals_returns_new_set(self):
        """Original set is unchanged."""
        original = SignalSet({"locCount": 500})
        updated = original.with_signals(locCount=600, hasWeb=True)

        assert original["locCount"] == 500
        assert "hasWeb" not in original
        assert updated["locCount"] == 600
        assert updated["hasWeb"] is True

    def test_without_removes_keys(self):
        """without drops keys."""
        signals = SignalSet({"a": 1, "b": 2}).without("a")
        assert dict(signals) == {"b": 2}

    def test_with_track_override(self):
        """Track overrides are ordinary signals under a reserved key."""
        signals = SignalSet().with_track_override("complexity", "Complex")

        assert signals[track_override_key("complexity")] == "Complex"
        assert track_override_key("complexity") == "track:complexity"
        assert track_override_key("complexity", prefix="force/") == "force/complexity"
