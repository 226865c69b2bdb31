"""Rotation decisions: size and interval predicates plus the direct strategy."""

from dataclasses import dataclass

from logroller.config import RollerConfig, RotateStrategy


@dataclass(frozen=True)
class RotationTrigger:
    max_size_bytes: int | None = None
    interval_seconds: float | None = None
    rotate_after_write: bool = False

    @classmethod
    def from_config(cls, config: RollerConfig) -> "RotationTrigger":
        if config.rotate_strategy == RotateStrategy.DIRECT:
            return cls(rotate_after_write=True)
        return cls(
            max_size_bytes=config.max_file_size_bytes,
            interval_seconds=config.rotation_interval_seconds,
        )

    def size_exceeded(self, current_size: int, write_len: int) -> bool:
        return self.max_size_bytes is not None and current_size + write_len > self.max_size_bytes

    def interval_elapsed(self, elapsed_seconds: float) -> bool:
        return self.interval_seconds is not None and elapsed_seconds > self.interval_seconds

    def should_rotate_before(self, current_size: int, write_len: int, elapsed_seconds: float) -> bool:
        """True if the active file must be rotated before writing *write_len* bytes."""
        return self.size_exceeded(current_size, write_len) or self.interval_elapsed(elapsed_seconds)

    def should_rotate_after(self) -> bool:
        return self.rotate_after_write
