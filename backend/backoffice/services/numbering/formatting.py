"""Document number format and candidate generation.

Numbers render as ``PREFIX-SCOPE-DISCRIMINATOR``, e.g. ``Q-2025-0042``:
the scope key (calendar year) is four digits and the discriminator is
zero-padded to a configurable width.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import cache
from random import Random

from backoffice.services.numbering.exceptions import InvalidDocumentNumber

SEPARATOR = "-"
SCOPE_WIDTH = 4

_PREFIX_RE = re.compile(r"^[A-Z][A-Z0-9]*$")
_NUMBER_RE = re.compile(r"^(?P<prefix>[A-Z][A-Z0-9]*)-(?P<scope>\d{4})-(?P<discriminator>\d+)$")


@dataclass(frozen=True)
class DocumentNumber:
    """A parsed or freshly generated document number."""

    prefix: str
    scope_key: int
    discriminator: int
    width: int

    def __post_init__(self) -> None:
        if not _PREFIX_RE.match(self.prefix):
            raise InvalidDocumentNumber(f"Invalid document number prefix: {self.prefix!r}")
        if not 0 <= self.scope_key < 10**SCOPE_WIDTH:
            raise InvalidDocumentNumber(f"Scope key out of range: {self.scope_key}")
        if self.width < 1:
            raise InvalidDocumentNumber(f"Discriminator width must be positive, got {self.width}")
        if not 0 <= self.discriminator < 10**self.width:
            raise InvalidDocumentNumber(f"Discriminator {self.discriminator} does not fit in {self.width} digits")

    @property
    def value(self) -> str:
        """Rendered form stored in the document's number column."""
        return (
            f"{self.prefix}{SEPARATOR}{self.scope_key:0{SCOPE_WIDTH}d}"
            f"{SEPARATOR}{self.discriminator:0{self.width}d}"
        )

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str, width: int | None = None) -> "DocumentNumber":
        """Parse a rendered number.

        Args:
            value: Rendered number, e.g. ``PO-2025-0042``
            width: Expected discriminator width; any width is accepted when None

        Raises:
            InvalidDocumentNumber: If the value does not match the format
        """
        match = _NUMBER_RE.match(value.strip())
        if not match:
            raise InvalidDocumentNumber(f"Not a document number: {value!r}")
        digits = match.group("discriminator")
        if width is not None and len(digits) != width:
            raise InvalidDocumentNumber(f"Expected {width}-digit discriminator in {value!r}")
        return cls(
            prefix=match.group("prefix"),
            scope_key=int(match.group("scope")),
            discriminator=int(digits),
            width=len(digits),
        )


@cache
def number_pattern(prefix: str, width: int) -> re.Pattern[str]:
    """Regex matching every number issued for ``prefix`` at the given width."""
    return re.compile(rf"^{re.escape(prefix)}-\d{{{SCOPE_WIDTH}}}-\d{{{width}}}$")


def generate_candidate(prefix: str, scope_key: int, width: int, rng: Random) -> DocumentNumber:
    """Draw a random candidate, uniform over ``[0, 10**width)``.

    Does not check uniqueness.
    """
    return DocumentNumber(prefix, scope_key, rng.randrange(10**width), width)


def generate_fallback(prefix: str, scope_key: int, width: int, clock: Callable[[], int]) -> DocumentNumber:
    """Derive the discriminator from a microsecond timestamp.

    ``clock`` returns nanoseconds (``time.time_ns``). The low ``width`` digits
    of the microsecond count are kept, so values taken at different
    microseconds within a ``10**width`` microsecond window never repeat.
    """
    microseconds = clock() // 1_000
    return DocumentNumber(prefix, scope_key, microseconds % 10**width, width)
