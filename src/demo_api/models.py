from typing import List, Optional

from pydantic import BaseModel, Field

from rod_tickler.models.step import Phase


class PresetModel(BaseModel):
    id: str
    label: str
    rod_length: int
    prices: List[int]
    description: str


class SolveRequest(BaseModel):
    rod_length: int
    prices: List[int] = Field(default_factory=list)


class FormulaRowModel(BaseModel):
    j: int
    price: int
    remainder_profit: int
    remainder_length: int
    total: int
    is_best: bool


class StepModel(BaseModel):
    index: int
    phase: Phase
    dp: List[int]
    cut: List[int]
    filled_up_to: int
    comparisons: int
    rationale: str
    code_lines: List[int]
    active_row: Optional[int] = None
    comparing_j: Optional[int] = None
    target_row: Optional[int] = None
    formula: List[FormulaRowModel] = Field(default_factory=list)
    best_profit: Optional[int] = None
    best_cut: Optional[int] = None
    pieces: List[int] = Field(default_factory=list)
    max_profit: Optional[int] = None


class SummaryModel(BaseModel):
    total_steps: int
    total_comparisons: int
    max_profit: int
    piece_count: int


class SolveResponse(BaseModel):
    rod_length: int
    prices: List[int]
    summary: SummaryModel
    dp: List[int]
    cut: List[int]
    pieces: List[int]
    steps: List[StepModel]
