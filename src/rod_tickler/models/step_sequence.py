from dataclasses import dataclass, field
from typing import Iterator, Tuple

from rod_tickler.models.problem import Problem
from rod_tickler.models.step import Step


@dataclass(frozen=True, slots=True)
class Summary:
    total_steps: int
    total_comparisons: int
    max_profit: int
    piece_count: int


@dataclass(frozen=True, slots=True)
class StepSequence:
    """Ordered, immutable trace of one solve, with random access by index."""

    problem: Problem
    steps: Tuple[Step, ...] = field(default_factory=tuple)
    dp: Tuple[int, ...] = field(default_factory=tuple)
    cut: Tuple[int, ...] = field(default_factory=tuple)
    pieces: Tuple[int, ...] = field(default_factory=tuple)
    comparisons: int = 0

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, index: int) -> Step:
        return self.steps[index]

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def step(self, index: int) -> Step:
        """Return the step at `index`, rejecting negative indexes."""
        if not (0 <= index < len(self.steps)):
            raise IndexError(f"Step index {index} out of range [0, {len(self.steps) - 1}]")
        return self.steps[index]

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def total_comparisons(self) -> int:
        return self.comparisons

    @property
    def max_profit(self) -> int:
        return self.dp[self.problem.rod_length]

    @property
    def piece_count(self) -> int:
        return len(self.pieces)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    def summary(self) -> Summary:
        return Summary(
            total_steps=self.total_steps,
            total_comparisons=self.total_comparisons,
            max_profit=self.max_profit,
            piece_count=self.piece_count,
        )
