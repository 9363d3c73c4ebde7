"""`KEY=VALUE` tokens -> pipeline request body. Pure functions, no I/O."""

from __future__ import annotations

from typing import Iterable

from core.domain.models import PipelineRequest, PipelineVariable
from core.errors import InvalidRequest, InvalidVariableSyntax


def parse_variable(token: str) -> PipelineVariable:
    """Split on the first `=`; the value may itself contain `=`."""

    key, sep, value = token.partition("=")
    if not sep or not key:
        raise InvalidVariableSyntax(token)
    return PipelineVariable(key=key, value=value)


def parse_variables(tokens: Iterable[str]) -> list[PipelineVariable]:
    return [parse_variable(token) for token in tokens]


def build_pipeline_request(ref: str, tokens: Iterable[str] = ()) -> PipelineRequest:
    if not ref or not ref.strip():
        raise InvalidRequest("Pipeline ref must not be empty")
    return PipelineRequest(ref=ref, variables=parse_variables(tokens))
