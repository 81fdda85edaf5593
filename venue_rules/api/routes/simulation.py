from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from venue_rules.core.config import Settings, get_settings
from venue_rules.core.logging import get_logger
from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import RuleSet
from venue_rules.schemas.simulation import SimulationOptions, SimulationRequest, SimulationResponse, TraceEventOut
from venue_rules.services.rule_evaluation import evaluate
from venue_rules.services.rule_normalizer import simulation_options

router = APIRouter()
logger = get_logger(__name__)


@router.post("/evaluate", response_model=SimulationResponse)
def evaluate_booking(payload: SimulationRequest, settings: Settings = Depends(get_settings)):
    now = payload.now or datetime.now(ZoneInfo(settings.timezone))
    trace = EvaluationTrace(logger=logger)
    result = evaluate(payload.rules, payload.request, now=now, trace=trace)

    logger.info(
        "simulation_evaluated",
        space=payload.request.space,
        allowed=result.allowed,
        violated_rule=result.violated_rule,
    )
    return SimulationResponse(
        result=result,
        trace=[TraceEventOut(step=e.step, message=e.message, data=e.data) for e in trace.events],
    )


@router.post("/options", response_model=SimulationOptions)
def options(rules: RuleSet):
    return simulation_options(rules)
