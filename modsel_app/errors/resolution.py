"""
Resolution-time error classifications.

These abort one resolution call and leave any cached decision untouched.
The caller has to change the signals or the registry before retrying.
"""

from .base import ResolutionError


class ConflictUnresolved(ResolutionError):
    """Two selected modules share a conflicts edge."""

    def __init__(self, a: str, b: str, **kwargs):
        super().__init__(f"Selected modules {a!r} and {b!r} conflict", **kwargs)
        self.a = a
        self.b = b

    @property
    def pair(self) -> tuple[str, str]:
        return (self.a, self.b)
