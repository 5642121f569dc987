"""Human readable rationale for each phase of the rod cutting trace.

Every builder works only from the numbers it is given, so the same step always
reads the same way regardless of what came before it.
"""
from typing import Sequence

PSEUDOCODE = [
    "dp[0] = 0",
    "for i from 1 to n:",
    "  for j from 1 to i:",
    "    candidate = price[j] + dp[i - j]",
    "    if candidate > best: best, best_cut = candidate, j",
    "  dp[i] = best",
    "  cut[i] = best_cut",
    "while n > 0: piece = cut[n]",
    "  pieces.append(piece); n -= piece",
]

INIT_LINES = (0, 1)
COMPARING_LINES = (2, 3, 4)
FILLED_LINES = (5, 6)
TRACEBACK_LINES = (7, 8)
COMPLETE_LINES = (7,)


def units(count: int) -> str:
    return f"{count} unit" + ("s" if count != 1 else "")


def join_pieces(pieces: Sequence[int]) -> str:
    return " + ".join(str(p) for p in pieces)


def describe_init(rod_length: int) -> str:
    return (
        f"The algorithm begins. We create a DP table with {rod_length + 1} entries "
        f"(lengths 0 through {rod_length}). dp[0] = 0 because a rod of length 0 earns nothing."
    )


def describe_comparison(i: int, j: int, price: int, remainder_profit: int, candidate: int, best_before: int) -> str:
    text = f"Trying to cut {units(j)} from the rod of length {i}. Price for {units(j)} = ${price}"
    if i - j > 0:
        text += f", plus the best profit for the remaining {units(i - j)} = ${remainder_profit}"
    text += f" -> total = ${candidate}."
    if candidate > best_before:
        text += f" New best! This is better than ${best_before}."
    else:
        text += f" Not better than the current best of ${best_before}. Moving on."
    return text


def describe_filled(i: int, best_profit: int, best_cut: int) -> str:
    if best_cut == i and best_profit == 0:
        lead = f"No first cut earns anything for length {i}, so the piece is kept whole."
    else:
        lead = (
            f"After trying all possible first cuts for length {i}, "
            f"the best option is to cut {units(best_cut)} first."
        )
    return f"{lead} This gives a maximum profit of ${best_profit}. The value dp[{i}] = {best_profit} is now stored."


def describe_traceback(from_length: int, piece: int, remaining: int, pieces: Sequence[int]) -> str:
    text = f"Tracing back the solution: from length {from_length}, the optimal first cut is {units(piece)}."
    if remaining > 0:
        text += f" Remaining rod: {units(remaining)}. Continue tracing..."
    text += f" Pieces so far: {join_pieces(pieces)}"
    return text


def describe_complete(rod_length: int, max_profit: int, pieces: Sequence[int], piece_prices: Sequence[int]) -> str:
    values = " + ".join(f"${p}" for p in piece_prices)
    return (
        f"Solution found! The rod of length {rod_length} should be cut into pieces: {join_pieces(pieces)}. "
        f"Piece values: {values} = ${max_profit}. "
        "This is the maximum possible profit; no other combination of cuts can earn more."
    )


def describe_formula_row(j: int, remainder_length: int, price: int, remainder_profit: int, total: int) -> str:
    return f"price[{j}] + dp[{remainder_length}] = {price} + {remainder_profit} = {total}"
