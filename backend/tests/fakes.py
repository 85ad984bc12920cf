"""Test doubles for the numbering subsystem."""

from collections.abc import Iterable
from random import Random


class FakeOracle:
    """Uniqueness oracle backed by an in-memory set; records every call."""

    def __init__(
        self,
        taken: Iterable[str] = (),
        *,
        everything_taken: bool = False,
        error: Exception | None = None,
    ):
        self.taken = set(taken)
        self.everything_taken = everything_taken
        self.error = error
        self.calls: list[str] = []

    async def __call__(self, value: str) -> bool:
        self.calls.append(value)
        if self.error is not None:
            raise self.error
        return self.everything_taken or value in self.taken


class ScriptedRandom:
    """Returns queued discriminators first, then seeded random ones."""

    def __init__(self, *values: int, seed: int = 1234):
        self.values = list(values)
        self._rng = Random(seed)

    def randrange(self, stop: int) -> int:
        if self.values:
            return self.values.pop(0)
        return self._rng.randrange(stop)


class FixedClock:
    """Nanosecond clock advancing by a fixed step on every call."""

    def __init__(self, start_ns: int, step_ns: int = 0):
        self.now_ns = start_ns
        self.step_ns = step_ns

    def __call__(self) -> int:
        value = self.now_ns
        self.now_ns += self.step_ns
        return value
