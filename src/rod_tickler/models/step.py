from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Phase(str, Enum):
    INIT = "init"
    COMPARING = "comparing"
    FILLED = "filled"
    TRACEBACK = "traceback"
    COMPLETE = "complete"

    def __str__(self):
        return self.value


@dataclass(frozen=True, slots=True)
class FormulaRow:
    """One candidate `price[j] + dp[i - j]` evaluated while filling dp[i]."""

    j: int
    price: int
    remainder_profit: int
    remainder_length: int
    total: int
    is_best: bool = False


@dataclass(frozen=True, slots=True)
class Step:
    """Immutable snapshot of the table at one decision of the algorithm.

    `dp` and `cut` are tuple copies taken when the step was recorded, so later
    work on the live arrays never reaches back into an earlier step. Fields
    that do not apply to a phase keep their defaults.

    `best_profit` is the best candidate seen *before* the comparison for a
    `comparing` step, and the chosen profit for a `filled` step.
    """

    index: int
    phase: Phase
    dp: Tuple[int, ...]
    cut: Tuple[int, ...]
    filled_up_to: int
    comparisons: int
    rationale: str = ""
    code_lines: Tuple[int, ...] = field(default_factory=tuple)

    active_row: Optional[int] = None
    comparing_j: Optional[int] = None
    target_row: Optional[int] = None
    formula: Tuple[FormulaRow, ...] = field(default_factory=tuple)
    best_profit: Optional[int] = None
    best_cut: Optional[int] = None
    pieces: Tuple[int, ...] = field(default_factory=tuple)
    max_profit: Optional[int] = None

    @property
    def number(self) -> int:
        """1-based position of the step, for display."""
        return self.index + 1

    @property
    def rod_length(self) -> int:
        return len(self.dp) - 1
