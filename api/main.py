from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cmdstack import get_version
from cmdstack.config import load_settings
from cmdstack.parameters.parser import MAX_BOUND
from cmdstack.parameters import (
    ConstraintViolation,
    Parameter,
    ParameterParseError,
    ValueCountMismatch,
    count_blanks,
    generate,
    index_blanks,
    parse,
    resolve_values,
    substitute,
)

logger = logging.getLogger("cmdstack.api")

app = FastAPI(title="cmdstack API")


class CommandRequest(BaseModel):
    command: str


class BoundsModel(BaseModel):
    min: Optional[int] = Field(None, ge=0, le=MAX_BOUND)
    max: Optional[int] = Field(None, ge=0, le=MAX_BOUND)


class ParameterModel(BaseModel):
    type: str = Field(..., description="String | Int | Boolean | Blank")
    data: BoundsModel = Field(
        default_factory=BoundsModel, description="min and max for String and Int"
    )


class ParseResponse(BaseModel):
    parameters: List[ParameterModel]
    blank_count: int


class IndexResponse(BaseModel):
    indexed_command: str


class GenerateRequest(BaseModel):
    command: str
    blank_param_values: List[str] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    generated_command: str
    generated_values: List[str]


class ReplaceRequest(BaseModel):
    command: str
    param_values: List[str]


class ReplaceResponse(BaseModel):
    command: str


class ValuesRequest(BaseModel):
    parameters: List[ParameterModel]
    alphabet: Optional[str] = None


class ValuesResponse(BaseModel):
    values: List[str]


@app.exception_handler(ParameterParseError)
async def _parse_error_handler(request: Request, exc: ParameterParseError):
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(ValueCountMismatch)
async def _count_mismatch_handler(request: Request, exc: ValueCountMismatch):
    logger.warning("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400, content={"error": "ValueCountMismatch", "detail": str(exc)}
    )


@app.exception_handler(ConstraintViolation)
async def _constraint_handler(request: Request, exc: ConstraintViolation):
    logger.warning("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400, content={"error": "ConstraintViolation", "detail": str(exc)}
    )


@app.get("/health")
def health():
    return {"status": "ok", "version": get_version()}


@app.post(
    "/parameters/parse", response_model=ParseResponse, response_model_exclude_none=True
)
def parse_parameters(req: CommandRequest):
    parameters = parse(req.command, load_settings())
    return ParseResponse(
        parameters=[ParameterModel(**p.to_dict()) for p in parameters],
        blank_count=count_blanks(parameters),
    )


@app.post("/parameters/index", response_model=IndexResponse)
def index_blank_parameters(req: CommandRequest):
    return IndexResponse(indexed_command=index_blanks(req.command))


@app.post("/parameters/generate", response_model=GenerateResponse)
def generate_parameters(req: GenerateRequest):
    """Parse, generate and substitute in one call."""
    settings = load_settings()
    parameters = parse(req.command, settings)
    values = generate(parameters, alphabet=settings.param_string_alphabet)
    resolved = resolve_values(parameters, values, req.blank_param_values)
    return GenerateResponse(
        generated_command=substitute(req.command, resolved), generated_values=values
    )


@app.post("/parameters/values", response_model=ValuesResponse)
def generate_values(req: ValuesRequest):
    """Generate values for an already parsed parameter list."""
    try:
        parameters = [
            Parameter.from_dict(p.model_dump(exclude_none=True)) for p in req.parameters
        ]
    except (KeyError, TypeError, ValueError) as exc:
        return JSONResponse(
            status_code=400, content={"error": "InvalidParameter", "detail": str(exc)}
        )
    alphabet = req.alphabet or load_settings().param_string_alphabet
    return ValuesResponse(values=generate(parameters, alphabet=alphabet))


@app.post("/parameters/replace", response_model=ReplaceResponse)
def replace_parameters(req: ReplaceRequest):
    return ReplaceResponse(command=substitute(req.command, req.param_values))
