"""Bounded-retry document number allocator.

Draws random candidates and asks the uniqueness oracle about each one. The
first free candidate wins. When every attempt collides the allocator gives up
on randomness and derives the discriminator from the current timestamp, which
is returned without another check so allocation always terminates.

The allocator keeps no state between calls and takes no locks. The unique
constraint on the document table decides the final outcome; see
UniqueNumberOnConflict for the insert side.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from random import Random, SystemRandom

import structlog

from backoffice.services.numbering.config import NumberingConfig
from backoffice.services.numbering.formatting import generate_candidate, generate_fallback
from backoffice.services.numbering.oracle import UniquenessOracle

logger = structlog.get_logger(__name__)


class AttemptOutcome(StrEnum):
    UNIQUE = "unique"
    COLLISION = "collision"


@dataclass(frozen=True)
class AllocationAttempt:
    """One candidate and the oracle's verdict. Lives only inside allocate()."""

    candidate_value: str
    outcome: AttemptOutcome
    attempt_index: int


class DocumentNumberAllocator:
    """Allocates document numbers checked against a uniqueness oracle."""

    def __init__(
        self,
        oracle: UniquenessOracle,
        config: NumberingConfig | None = None,
        *,
        rng: Random | None = None,
        clock: Callable[[], int] = time.time_ns,
    ):
        self.oracle = oracle
        self.config = config or NumberingConfig.from_settings()
        self.rng = rng or SystemRandom()
        self.clock = clock

    async def allocate(self, prefix: str, scope_key: int) -> str:
        """Return a document number that the oracle did not report as taken.

        Makes at most ``config.max_attempts`` oracle calls. Collisions are
        handled here; OracleUnavailable propagates to the caller.
        """
        attempts: list[AllocationAttempt] = []

        for attempt_index in range(self.config.max_attempts):
            candidate = generate_candidate(prefix, scope_key, self.config.width, self.rng).value

            if not await self.oracle(candidate):
                attempts.append(AllocationAttempt(candidate, AttemptOutcome.UNIQUE, attempt_index))
                logger.debug("Allocated document number", number=candidate, attempts=len(attempts))
                return candidate

            attempts.append(AllocationAttempt(candidate, AttemptOutcome.COLLISION, attempt_index))
            logger.debug(
                "Document number collision",
                candidate=candidate,
                attempt=attempt_index + 1,
                max_attempts=self.config.max_attempts,
            )

        fallback = generate_fallback(prefix, scope_key, self.config.effective_fallback_width, self.clock).value
        logger.warning(
            "Document number retry budget exhausted, using timestamp fallback",
            prefix=prefix,
            scope_key=scope_key,
            collisions=[a.candidate_value for a in attempts],
            fallback=fallback,
        )
        return fallback
