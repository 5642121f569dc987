import dataclasses
from typing import List

from fastapi import FastAPI, APIRouter, HTTPException
import structlog

from rod_tickler.errors import ProblemError
from rod_tickler.models.problem import Problem
from rod_tickler.models.step_sequence import StepSequence
from rod_tickler.presets import PRESETS, Preset, get_preset
from rod_tickler.solver import solve

from . import models

log = structlog.get_logger(
    processors=[
        structlog.processors.JSONRenderer(indent=2),
    ],
)

app = FastAPI(title="Rod Cutting Demo API")

router = APIRouter()


def preset_response(preset: Preset) -> models.PresetModel:
    return models.PresetModel(
        id=preset.id,
        label=preset.label,
        rod_length=preset.rod_length,
        prices=list(preset.prices),
        description=preset.description,
    )


def build_solve_response(sequence: StepSequence) -> models.SolveResponse:
    """ Convert a solved trace into its JSON response. """
    summary = sequence.summary()
    return models.SolveResponse(
        rod_length=sequence.problem.rod_length,
        prices=list(sequence.problem.prices),
        summary=models.SummaryModel(**dataclasses.asdict(summary)),
        dp=list(sequence.dp),
        cut=list(sequence.cut),
        pieces=list(sequence.pieces),
        steps=[models.StepModel(**dataclasses.asdict(step)) for step in sequence],
    )


@router.get("/presets", response_model=List[models.PresetModel])
def list_presets():
    """ All built-in demo problems. """
    return [preset_response(p) for p in PRESETS]


@router.get("/presets/{preset_id}", response_model=models.PresetModel)
def preset(preset_id: str):
    """ One demo problem by id. """
    try:
        return preset_response(get_preset(preset_id))
    except KeyError:
        log.warning("unknown preset", preset_id=preset_id)
        raise HTTPException(status_code=404, detail=f"Unknown preset: {preset_id}")


@router.post("/solve", response_model=models.SolveResponse)
def solve_api(req: models.SolveRequest):
    """ Solve the given problem and return every step of the trace. """
    try:
        problem = Problem(rod_length=req.rod_length, prices=tuple(req.prices))
    except ProblemError as e:
        log.warning("invalid problem", rod_length=req.rod_length, prices=req.prices, error=str(e))
        raise HTTPException(status_code=400, detail=f"{e}")

    sequence = solve(problem)
    log.info(
        "solved",
        rod_length=problem.rod_length,
        prices=list(problem.prices),
        max_profit=sequence.max_profit,
        pieces=list(sequence.pieces),
        steps=len(sequence),
    )
    return build_solve_response(sequence)


app.include_router(router, prefix="/api")
