from dataclasses import dataclass, field
from typing import Dict, Tuple

from rod_tickler.models.problem import Problem


@dataclass(frozen=True, slots=True)
class Preset:
    id: str
    label: str
    rod_length: int
    prices: Tuple[int, ...] = field(default_factory=tuple)
    description: str = ""

    def problem(self) -> Problem:
        return Problem(rod_length=self.rod_length, prices=self.prices)


PRESETS: Tuple[Preset, ...] = (
    Preset(
        id="classic",
        label="Classic",
        rod_length=8,
        prices=(1, 5, 8, 9, 10, 17, 17, 20),
        description="The textbook example. Short pieces are surprisingly valuable.",
    ),
    Preset(
        id="increasing",
        label="Increasing",
        rod_length=8,
        prices=(1, 3, 6, 10, 15, 21, 28, 36),
        description="Longer pieces earn more per unit. Is cutting ever worth it?",
    ),
    Preset(
        id="bulk",
        label="Bulk Discount",
        rod_length=8,
        prices=(10, 18, 22, 25, 27, 28, 29, 30),
        description="Diminishing returns. Short pieces dominate.",
    ),
    Preset(
        id="timber",
        label="Timber",
        rod_length=10,
        prices=(2, 5, 7, 9, 10, 12, 13, 14, 16, 18),
        description="Realistic timber pricing with mixed optimal cuts.",
    ),
    Preset(
        id="challenge",
        label="Challenge",
        rod_length=12,
        prices=(3, 5, 10, 11, 13, 17, 17, 20, 24, 28, 31, 35),
        description="Can you predict the answer before running it?",
    ),
)

PRESETS_BY_ID: Dict[str, Preset] = {p.id: p for p in PRESETS}
DEFAULT_PRESET = "classic"


def get_preset(preset_id: str) -> Preset:
    try:
        return PRESETS_BY_ID[preset_id]
    except KeyError:
        raise KeyError(f"Unknown preset: {preset_id}") from None
