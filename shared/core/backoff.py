"""Backoff utilities.

`Backoff` holds the sleep interval of a polling loop. The interval starts at
`base`, is multiplied after every idle poll (never beyond `cap`) and snaps back
to `base` once work is found. Each method returns the delay the caller should
sleep for *now*; the state advances afterwards, so consecutive idle polls sleep
base, base*m, base*m^2, ... capped at `cap`.
"""
from __future__ import annotations


class Backoff:
    def __init__(self, base: float, cap: float, multiplier: float = 2.0) -> None:
        if base < 0:
            raise ValueError("backoff base must be >= 0")
        if cap < base:
            raise ValueError("backoff cap must be >= base")
        if multiplier < 1.0:
            raise ValueError("backoff multiplier must be >= 1")
        self._base = float(base)
        self._cap = float(cap)
        self._multiplier = float(multiplier)
        self._current = self._base

    @property
    def base(self) -> float:
        return self._base

    @property
    def cap(self) -> float:
        return self._cap

    @property
    def current(self) -> float:
        return self._current

    def idle(self) -> float:
        """Nothing to do: sleep the current interval, then grow it."""
        delay = self._current
        self._current = min(self._current * self._multiplier, self._cap)
        return delay

    def success(self) -> float:
        """Work was done: reset to base and sleep base."""
        self._current = self._base
        return self._base

    def hold(self) -> float:
        """Sleep the current interval without changing it."""
        return self._current
