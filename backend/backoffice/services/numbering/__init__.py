"""Document number allocation."""

from backoffice.services.numbering.allocator import AllocationAttempt, AttemptOutcome, DocumentNumberAllocator
from backoffice.services.numbering.config import NumberingConfig
from backoffice.services.numbering.exceptions import (
    AllocationExhausted,
    InvalidDocumentNumber,
    NumberingError,
    OracleUnavailable,
)
from backoffice.services.numbering.formatting import (
    DocumentNumber,
    generate_candidate,
    generate_fallback,
    number_pattern,
)
from backoffice.services.numbering.oracle import SqlUniquenessOracle, UniquenessOracle

__all__ = [
    "AllocationAttempt",
    "AllocationExhausted",
    "AttemptOutcome",
    "DocumentNumber",
    "DocumentNumberAllocator",
    "InvalidDocumentNumber",
    "NumberingConfig",
    "NumberingError",
    "OracleUnavailable",
    "SqlUniquenessOracle",
    "UniquenessOracle",
    "generate_candidate",
    "generate_fallback",
    "number_pattern",
]
