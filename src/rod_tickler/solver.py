from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import structlog

from rod_tickler.models.problem import Problem
from rod_tickler.models.step import FormulaRow, Step
from rod_tickler.models.step_sequence import StepSequence
from rod_tickler.recorder import StepRecorder

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class Evaluation:
    dp: Tuple[int, ...]
    cut: Tuple[int, ...]
    comparisons: int
    steps_emitted: int


@dataclass(frozen=True, slots=True)
class Traceback:
    pieces: Tuple[int, ...]
    steps: Tuple[Step, ...]


def evaluate(problem: Problem, recorder: Optional[StepRecorder] = None) -> Evaluation:
    """
    Fill dp[0..n] and cut[0..n] bottom-up, recording every comparison and row update.
    dp[i] = max over j in 1..i of price[j] + dp[i - j]. Candidates are tried in
    increasing j and only a strictly greater one replaces the best, so ties keep
    the smallest cut.
    """
    if recorder is None:
        recorder = StepRecorder(problem.prices)

    n = problem.rod_length
    prices = problem.prices
    dp = [0] * (n + 1)
    cut = [0] * (n + 1)
    comparisons = 0

    recorder.init(dp, cut)

    for i in range(1, n + 1):
        best_profit = 0
        best_cut = 0
        formula: List[FormulaRow] = []

        for j in range(1, i + 1):
            candidate = prices[j - 1] + dp[i - j]
            comparisons += 1
            formula.append(FormulaRow(
                j=j,
                price=prices[j - 1],
                remainder_profit=dp[i - j],
                remainder_length=i - j,
                total=candidate,
            ))
            recorder.comparing(
                dp, cut,
                row=i,
                j=j,
                formula=formula,
                best_before=best_profit,
                comparisons=comparisons,
            )

            if candidate > best_profit:
                best_profit = candidate
                best_cut = j

        # Nothing beat zero: every candidate is 0, so keep the piece whole.
        if best_cut == 0:
            best_cut = i

        dp[i] = best_profit
        cut[i] = best_cut
        formula = [
            FormulaRow(r.j, r.price, r.remainder_profit, r.remainder_length, r.total, r.j == best_cut)
            for r in formula
        ]
        recorder.filled(dp, cut, row=i, formula=formula, comparisons=comparisons)
        log.debug("row filled", row=i, profit=best_profit, cut=best_cut, comparisons=comparisons)

    return Evaluation(
        dp=tuple(dp),
        cut=tuple(cut),
        comparisons=comparisons,
        steps_emitted=len(recorder),
    )


def reconstruct(
    dp: Sequence[int],
    cut: Sequence[int],
    rod_length: int,
    recorder: Optional[StepRecorder] = None,
    *,
    comparisons: int = 0,
) -> Traceback:
    """Peel pieces off the rod by following cut[] from rod_length down to 0."""
    if recorder is None:
        recorder = StepRecorder()

    first_index = len(recorder)
    pieces: List[int] = []
    remaining = rod_length

    # cut[k] >= 1 for every k > 0, so remaining strictly decreases.
    while remaining > 0:
        piece = cut[remaining]
        if piece < 1:
            raise ValueError(f"cut[{remaining}] = {piece}; the table has not been filled")
        pieces.append(piece)
        recorder.traceback(
            dp, cut,
            row=remaining,
            target_row=remaining - piece,
            pieces=pieces,
            comparisons=comparisons,
        )
        remaining -= piece

    recorder.complete(dp, cut, pieces=pieces, comparisons=comparisons)
    return Traceback(pieces=tuple(pieces), steps=recorder.steps[first_index:])


def solve(problem: Problem) -> StepSequence:
    """Run the full pipeline for a problem and return its immutable trace."""
    recorder = StepRecorder(problem.prices)
    evaluation = evaluate(problem, recorder)
    traceback = reconstruct(
        evaluation.dp,
        evaluation.cut,
        problem.rod_length,
        recorder,
        comparisons=evaluation.comparisons,
    )
    sequence = StepSequence(
        problem=problem,
        steps=recorder.steps,
        dp=evaluation.dp,
        cut=evaluation.cut,
        pieces=traceback.pieces,
        comparisons=evaluation.comparisons,
    )
    log.debug(
        "solved",
        rod_length=problem.rod_length,
        max_profit=sequence.max_profit,
        pieces=list(sequence.pieces),
        steps=len(sequence),
    )
    return sequence
