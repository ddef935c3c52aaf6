"""
API router for safety evaluation.
"""
from fastapi import APIRouter, HTTPException

from flysafe.api.dependencies import SafetyEvaluatorDep
from flysafe.api.v1.models.requests import SafetyEvaluationRequest
from flysafe.domain.errors import InvalidInputError
from flysafe.domain.models import SafetyVerdict


router = APIRouter(
    prefix="/safety",
    tags=["safety"],
)


@router.post(
    "/evaluate",
    response_model=SafetyVerdict,
    summary="Evaluate flight safety",
    description="""
    Evaluate weather conditions against a drone envelope.

    - **RED**: a wind, temperature, precipitation, visibility or cloud base
      limit is breached
    - **ORANGE**: all limits hold but a metric is marginal (wind within 10%
      of the limit, temperature within 2 °C of a limit or near freezing,
      visibility within 10% of 2 km, cloud cover above 90%)
    - **GREEN**: conditions are well within limits
    """,
    responses={
        400: {"description": "Non-finite or invalid numeric input"},
    },
)
async def evaluate_safety(
    body: SafetyEvaluationRequest,
    evaluator: SafetyEvaluatorDep,
) -> SafetyVerdict:
    """
    Evaluate flight safety for the given weather and envelope.

    Raises:
        HTTPException: If an input is not a finite number
    """
    try:
        return evaluator.evaluate(body.weather, body.envelope)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
