"""Outcome values for best-effort side effects (cache, publication)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Ok:
    """The side effect completed."""

    ok = True


@dataclass(frozen=True)
class Failed:
    """The side effect failed; the primary operation still stands."""

    reason: str

    ok = False


SideEffectResult = Ok | Failed

OK = Ok()
