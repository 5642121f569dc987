import json
import re
from typing import List, Literal, Sequence, Union

from rod_tickler.errors import InvalidPrice, ProblemError

PriceFormat = Union[Literal[
    "csv",
    "json",
    "lines",
], str]

PRICE_SEPARATORS = re.compile(r"[,\s]")


def _parse_price(raw: str, piece_length: int) -> int:
    raw = raw.strip()
    # Blank fields count as zero.
    if raw == "":
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise InvalidPrice(piece_length, raw, "not a whole number") from None
    if value < 0:
        raise InvalidPrice(piece_length, value, "cannot be negative")
    return value


def parse_prices(text: str) -> List[int]:
    """Parse comma and/or whitespace separated prices, e.g. "1, 5, 8, 9"."""
    text = text.strip().rstrip(",")
    if not text:
        return []
    if "," in text:
        fields = text.split(",")
    else:
        fields = PRICE_SEPARATORS.split(text)
        fields = [f for f in fields if f != ""]
    return [_parse_price(field, i) for i, field in enumerate(fields, start=1)]


def load_prices(file_path: str, format: PriceFormat) -> List[int]:
    """Load a price table from a file."""
    with open(file_path, "r", encoding="utf-8") as f:
        data = f.read()
    if format == "csv":
        return parse_prices(data.replace("\n", ","))
    elif format == "lines":
        lines = [line for line in data.splitlines() if line.strip() != ""]
        return [_parse_price(line, i) for i, line in enumerate(lines, start=1)]
    elif format == "json":
        values = json.loads(data)
        if isinstance(values, dict):
            values = values.get("prices")
        if not isinstance(values, list):
            raise ProblemError(f"Expected a JSON list of prices in {file_path}")
        return list(values)
    else:
        raise ValueError(f"Invalid price format: {format}")


def fit_prices(prices: Sequence[int], rod_length: int) -> List[int]:
    """Pad with zero prices or truncate so there is one price per length."""
    fitted = list(prices[:rod_length])
    fitted.extend([0] * (rod_length - len(fitted)))
    return fitted
