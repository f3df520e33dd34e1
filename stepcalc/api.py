"""HTTP API for the expression engine.

Endpoints:
- POST /evaluate  evaluate an expression given in the JSON body
- GET  /evaluate  the same with query parameters
- GET  /functions list builtin functions and constants

Calculator errors answer 400 with the error class name; anything else is
logged and answers 500.
"""

import logging
import math
from typing import Annotated, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from stepcalc.errors import CalculatorError
from stepcalc.formatting import canonicalize_spacing, format_number
from stepcalc.functions import CONSTANTS, FUNCTION_NAMES, FUNCTIONS
from stepcalc.parser import calculate

logger = logging.getLogger(__name__)

# ----- Pydantic Models -----

class EvaluateRequest(BaseModel):
    """Expression to evaluate."""
    expression: str
    detailed: bool = False

    @field_validator('expression')
    @classmethod
    def expression_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Expression cannot be empty')
        return v.strip()


class StepModel(BaseModel):
    """One recorded sub-computation."""
    operation: str
    result: Optional[float] = None
    display: str


class EvaluateResponse(BaseModel):
    """Value of an expression, with steps when requested.

    ``result`` is null when the value is not finite; ``display`` always
    carries the rendered value.
    """
    expression: str
    result: Optional[float] = None
    display: str
    steps: List[StepModel] = Field(default_factory=list)


class FunctionInfo(BaseModel):
    name: str
    aliases: List[str] = Field(default_factory=list)
    summary: str


class CatalogResponse(BaseModel):
    functions: List[FunctionInfo]
    constants: Dict[str, float]


class ErrorResponse(BaseModel):
    """Model for error responses."""
    detail: str
    error: Optional[str] = None


class ExpressionError(Exception):
    """Carries a calculator error out of a route."""

    def __init__(self, error: CalculatorError):
        self.error = error
        super().__init__(str(error))


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def run_evaluation(expression: str, detailed: bool) -> EvaluateResponse:
    try:
        value, steps = calculate(expression, detailed)
    except CalculatorError as e:
        raise ExpressionError(e)
    return EvaluateResponse(
        expression=canonicalize_spacing(expression),
        result=_finite_or_none(value),
        display=format_number(value),
        steps=[
            StepModel(
                operation=canonicalize_spacing(step.operation),
                result=_finite_or_none(step.result),
                display=format_number(step.result),
            )
            for step in steps
        ],
    )


def build_catalog() -> CatalogResponse:
    functions: Dict[str, FunctionInfo] = {}
    for name in FUNCTION_NAMES:
        spec = FUNCTIONS[name]
        info = functions.setdefault(
            spec.name, FunctionInfo(name=spec.name, summary=spec.summary)
        )
        if name != spec.name:
            info.aliases.append(name)
    return CatalogResponse(functions=list(functions.values()), constants=dict(CONSTANTS))


# ----- Application -----

app = FastAPI(
    title="Step Calculator API",
    description="Evaluate arithmetic expressions with an optional step-by-step trace",
    version="1.0.0",
)


@app.exception_handler(ExpressionError)
async def expression_error_handler(request: Request, exc: ExpressionError) -> JSONResponse:
    logger.info(f"Rejected expression: {exc.error}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc.error), "error": type(exc.error).__name__},
    )


_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.post(
    "/evaluate",
    response_model=EvaluateResponse,
    responses=_RESPONSES,
    summary="Evaluate an expression",
)
async def evaluate_post(request: EvaluateRequest) -> EvaluateResponse:
    logger.info(f"Processing POST evaluation of {request.expression!r}")
    try:
        return run_evaluation(request.expression, request.detailed)
    except ExpressionError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in evaluate_post: {str(e)}")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@app.get(
    "/evaluate",
    response_model=EvaluateResponse,
    responses=_RESPONSES,
    summary="Evaluate an expression (GET)",
)
async def evaluate_get(
    expression: Annotated[str, Query(..., min_length=1, description="Expression to evaluate")],
    detailed: Annotated[bool, Query(description="Include the step-by-step trace")] = False,
) -> EvaluateResponse:
    logger.info(f"Processing GET evaluation of {expression!r}")
    try:
        return run_evaluation(expression, detailed)
    except ExpressionError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in evaluate_get: {str(e)}")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@app.get("/functions", response_model=CatalogResponse, summary="List functions and constants")
async def list_functions() -> CatalogResponse:
    return build_catalog()
