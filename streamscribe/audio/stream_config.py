"""Input stream configuration types."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StreamConfig:
    """Resolved input stream parameters, fixed for the process lifetime."""

    channels: int
    sample_rate: int
    sample_format: str
    device: Optional[int] = None
    blocksize: int = 0

    def __post_init__(self) -> None:
        if self.channels != 1:
            raise ValueError(f"Capture is mono only, got {self.channels} channels")
        if int(self.sample_rate) <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")


@dataclass(frozen=True)
class SupportedConfig:
    """One input configuration candidate exposed by a device."""

    channels: int
    sample_format: str
    sample_rates: tuple[int, ...]

    @property
    def max_sample_rate(self) -> int:
        return max(self.sample_rates)

    def with_max_sample_rate(
        self, device: Optional[int] = None, blocksize: int = 0
    ) -> StreamConfig:
        """Build a stream configuration at this candidate's highest rate."""
        return StreamConfig(
            channels=self.channels,
            sample_rate=self.max_sample_rate,
            sample_format=self.sample_format,
            device=device,
            blocksize=blocksize,
        )
