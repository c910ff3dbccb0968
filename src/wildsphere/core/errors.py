"""
Error taxonomy.

All library errors derive from `WildSphereError` so outer layers (API, CLI) can
translate them in one place. Each also subclasses the closest builtin so plain
`except ValueError` handlers keep working.
"""

from __future__ import annotations


class WildSphereError(Exception):
    """Base class for all WildSphere errors."""


class DataError(WildSphereError, ValueError):
    """The ingested dataset is empty or malformed."""


class InvalidArgument(WildSphereError, ValueError):
    """A caller passed an invalid query argument (e.g. k < 1)."""


class NotFound(WildSphereError, LookupError):
    """No point exists for the requested id."""


class IndexNotReady(WildSphereError, RuntimeError):
    """A query was issued before any index was built."""
