"""
Immutable signal snapshots for a target project.

A SignalSet maps signal keys to typed values (boolean, number or enumerated
string). It is produced by whatever collects project facts and is consumed
read-only by the resolver. Equality is structural and the digest is derived
from the same canonical form, so equal sets always hash equally.
"""

import hashlib
import json
import math
from collections.abc import Mapping
from typing import Any, Iterator, Optional, Union

from ..errors import InvalidSignalError

SignalValue = Union[bool, int, float, str]

TRACK_OVERRIDE_PREFIX = "track:"


def track_override_key(group: str, prefix: str = TRACK_OVERRIDE_PREFIX) -> str:
    """Signal key that forces the winner of a track group."""
    return f"{prefix}{group}"


def _validate_value(key: str, value: Any) -> SignalValue:
    if isinstance(value, bool) or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidSignalError(
                f"Signal {key!r} must be a finite number, got {value!r}",
                key=key, value=value
            )
        return value
    raise InvalidSignalError(
        f"Signal {key!r} has unsupported type {type(value).__name__}",
        key=key, value=value
    )


def _canonical(value: SignalValue) -> tuple[str, Any]:
    """Type-tagged canonical form used for equality and hashing."""
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, float) and value.is_integer():
        return ("num", int(value))
    return ("num", value)


class SignalSet(Mapping):
    """Immutable mapping of signal key to typed value."""

    __slots__ = ("_values", "_digest")

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        merged = dict(values or {})
        merged.update(kwargs)

        validated = {}
        for key, value in merged.items():
            if not isinstance(key, str) or not key:
                raise InvalidSignalError(
                    f"Signal keys must be non-empty strings, got {key!r}",
                    key=key, value=value
                )
            validated[key] = _validate_value(key, value)

        self._values = {key: validated[key] for key in sorted(validated)}
        self._digest: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SignalSet":
        """Build a signal set, passing existing sets through unchanged."""
        if isinstance(values, SignalSet):
            return values
        return cls(values)

    def __getitem__(self, key: str) -> SignalValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignalSet):
            return NotImplemented
        return self._canonical_items() == other._canonical_items()

    def __hash__(self) -> int:
        return hash(self.digest)

    def __repr__(self) -> str:
        return f"SignalSet({self._values!r})"

    def _canonical_items(self) -> list[tuple[str, tuple[str, Any]]]:
        return [(key, _canonical(value)) for key, value in self._values.items()]

    @property
    def digest(self) -> str:
        """Hex SHA-256 of the canonical encoding of this set."""
        if self._digest is None:
            payload = json.dumps(self._canonical_items(), separators=(",", ":"))
            self._digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        return self._digest

    def with_signals(self, **updates: Any) -> "SignalSet":
        """Return a new set with the given signals added or replaced."""
        return SignalSet(self._values, **updates)

    def without(self, *keys: str) -> "SignalSet":
        """Return a new set with the given keys removed."""
        return SignalSet({k: v for k, v in self._values.items() if k not in keys})

    def with_track_override(self, group: str, module_id: str,
                            prefix: str = TRACK_OVERRIDE_PREFIX) -> "SignalSet":
        """Return a new set forcing ``module_id`` as the winner of ``group``."""
        return SignalSet(self._values, **{track_override_key(group, prefix): module_id})

    def to_dict(self) -> dict[str, SignalValue]:
        return dict(self._values)
