"""Configuration for document number allocation."""

from dataclasses import dataclass

from backoffice.config import settings

# Timestamp digits kept by the fallback when no width is configured
DEFAULT_FALLBACK_WIDTH = 6


@dataclass
class NumberingConfig:
    """Widths and retry bounds for document number allocation."""

    width: int = 4
    max_attempts: int = 10  # Random candidates checked before the timestamp fallback
    insert_max_attempts: int = 3  # Full allocate + insert cycles on unique constraint conflict
    fallback_width: int | None = None  # None = max(6, width + 2)

    def __post_init__(self) -> None:
        if self.fallback_width is not None and self.fallback_width <= self.width:
            raise ValueError(
                f"fallback_width ({self.fallback_width}) must be greater than width ({self.width})"
            )

    @property
    def effective_fallback_width(self) -> int:
        """Fallback discriminator width, always wider than the random range."""
        if self.fallback_width is not None:
            return self.fallback_width
        return max(DEFAULT_FALLBACK_WIDTH, self.width + 2)

    @classmethod
    def from_settings(cls) -> "NumberingConfig":
        return cls(
            width=settings.number_width,
            max_attempts=settings.number_max_attempts,
            insert_max_attempts=settings.number_insert_max_attempts,
            fallback_width=settings.number_fallback_width,
        )
