from typing import List, Sequence, Tuple

from rod_tickler import explain
from rod_tickler.models.step import FormulaRow, Phase, Step


class StepRecorder:
    """Append-only log of steps. Snapshots `dp`/`cut` as tuples on every emit."""

    def __init__(self, prices: Sequence[int] = ()) -> None:
        self._prices = tuple(prices)
        self._steps: List[Step] = []

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def steps(self) -> Tuple[Step, ...]:
        return tuple(self._steps)

    def _emit(self, phase: Phase, dp: Sequence[int], cut: Sequence[int], **fields) -> Step:
        step = Step(
            index=len(self._steps),
            phase=phase,
            dp=tuple(dp),
            cut=tuple(cut),
            **fields,
        )
        self._steps.append(step)
        return step

    def init(self, dp: Sequence[int], cut: Sequence[int]) -> Step:
        rod_length = len(dp) - 1
        return self._emit(
            Phase.INIT, dp, cut,
            filled_up_to=0,
            comparisons=0,
            rationale=explain.describe_init(rod_length),
            code_lines=explain.INIT_LINES,
        )

    def comparing(
        self,
        dp: Sequence[int],
        cut: Sequence[int],
        *,
        row: int,
        j: int,
        formula: Sequence[FormulaRow],
        best_before: int,
        comparisons: int,
    ) -> Step:
        current = formula[-1]
        return self._emit(
            Phase.COMPARING, dp, cut,
            filled_up_to=row - 1,
            comparisons=comparisons,
            rationale=explain.describe_comparison(
                row, j, current.price, current.remainder_profit, current.total, best_before
            ),
            code_lines=explain.COMPARING_LINES,
            active_row=row,
            comparing_j=j,
            formula=tuple(formula),
            best_profit=best_before,
        )

    def filled(
        self,
        dp: Sequence[int],
        cut: Sequence[int],
        *,
        row: int,
        formula: Sequence[FormulaRow],
        comparisons: int,
    ) -> Step:
        best_profit, best_cut = dp[row], cut[row]
        return self._emit(
            Phase.FILLED, dp, cut,
            filled_up_to=row,
            comparisons=comparisons,
            rationale=explain.describe_filled(row, best_profit, best_cut),
            code_lines=explain.FILLED_LINES,
            active_row=row,
            formula=tuple(formula),
            best_profit=best_profit,
            best_cut=best_cut,
        )

    def traceback(
        self,
        dp: Sequence[int],
        cut: Sequence[int],
        *,
        row: int,
        target_row: int,
        pieces: Sequence[int],
        comparisons: int,
    ) -> Step:
        return self._emit(
            Phase.TRACEBACK, dp, cut,
            filled_up_to=len(dp) - 1,
            comparisons=comparisons,
            rationale=explain.describe_traceback(row, row - target_row, target_row, pieces),
            code_lines=explain.TRACEBACK_LINES,
            active_row=row,
            target_row=target_row,
            pieces=tuple(pieces),
        )

    def complete(
        self,
        dp: Sequence[int],
        cut: Sequence[int],
        *,
        pieces: Sequence[int],
        comparisons: int,
    ) -> Step:
        rod_length = len(dp) - 1
        max_profit = dp[rod_length]
        piece_prices = self._piece_prices(dp, pieces)
        return self._emit(
            Phase.COMPLETE, dp, cut,
            filled_up_to=rod_length,
            comparisons=comparisons,
            rationale=explain.describe_complete(rod_length, max_profit, pieces, piece_prices),
            code_lines=explain.COMPLETE_LINES,
            pieces=tuple(pieces),
            max_profit=max_profit,
        )

    def _piece_prices(self, dp: Sequence[int], pieces: Sequence[int]) -> List[int]:
        """Price of each piece, read back from dp when no price list was given."""
        if self._prices:
            return [self._prices[p - 1] for p in pieces]
        values = []
        remaining = len(dp) - 1
        for piece in pieces:
            values.append(dp[remaining] - dp[remaining - piece])
            remaining -= piece
        return values
