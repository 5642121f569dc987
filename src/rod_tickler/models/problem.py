from dataclasses import dataclass, field
from typing import Tuple

import structlog

from rod_tickler.errors import InvalidLength, InvalidPrice, PriceCountMismatch

MIN_ROD_LENGTH = 1
MAX_ROD_LENGTH = 15
PRICE_WARNING_THRESHOLD = 999

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class Problem:
    """A rod length and one price per integer piece length 1..rod_length."""

    rod_length: int
    prices: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.rod_length, bool) or not isinstance(self.rod_length, int):
            raise InvalidLength(f"Rod length must be an integer, got {self.rod_length!r}")
        if not (MIN_ROD_LENGTH <= self.rod_length <= MAX_ROD_LENGTH):
            raise InvalidLength(
                f"Rod length {self.rod_length} outside [{MIN_ROD_LENGTH}, {MAX_ROD_LENGTH}]"
            )

        prices = tuple(self.prices)
        if len(prices) != self.rod_length:
            raise PriceCountMismatch(
                f"Expected {self.rod_length} prices, got {len(prices)}"
            )

        for piece_length, price in enumerate(prices, start=1):
            if isinstance(price, bool) or not isinstance(price, int):
                raise InvalidPrice(piece_length, price, "not a whole number")
            if price < 0:
                raise InvalidPrice(piece_length, price, "cannot be negative")
            if price > PRICE_WARNING_THRESHOLD:
                log.warning("price unusually high", piece_length=piece_length, price=price)

        object.__setattr__(self, "prices", prices)

    def price_of(self, piece_length: int) -> int:
        return self.prices[piece_length - 1]
