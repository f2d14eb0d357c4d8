from dataclasses import dataclass


@dataclass(frozen=True)
class SelectionRange:
    """A contiguous time interval, in seconds, with start <= end."""
    start_seconds: float
    end_seconds: float

    def __post_init__(self) -> None:
        if self.start_seconds > self.end_seconds:
            raise ValueError("Selection start must not be after its end.")

    @classmethod
    def between(cls, a: float, b: float) -> "SelectionRange":
        """Build a range from two endpoints given in either order."""
        return cls(min(a, b), max(a, b))

    @property
    def duration_seconds(self) -> float:
        return self.end_seconds - self.start_seconds

    @property
    def is_empty(self) -> bool:
        return self.end_seconds <= self.start_seconds

    def contains(self, seconds: float) -> bool:
        return self.start_seconds <= seconds <= self.end_seconds
