"""Success and error envelopes wrapping every API response."""

from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .errors import ApiClientError


class ApiErrorBody(BaseModel):
    code: int
    message: str


class ApiFailure(BaseModel):
    """``{"error": {"code": ..., "message": ...}}``"""

    error: ApiErrorBody


class ApiSuccess(BaseModel):
    """``{"data": ...}``"""

    data: Any


# An error envelope wins when a payload somehow carries both keys
ApiEnvelope = Annotated[Union[ApiFailure, ApiSuccess], Field(union_mode="left_to_right")]

_envelope_adapter: TypeAdapter[Union[ApiFailure, ApiSuccess]] = TypeAdapter(ApiEnvelope)


def decode_envelope(payload: Any) -> Union[ApiFailure, ApiSuccess]:
    """
    Decode a parsed JSON payload into exactly one envelope variant.

    Raises:
        ApiClientError: If the payload is neither a success nor an error envelope
    """
    try:
        return _envelope_adapter.validate_python(payload)
    except ValidationError as e:
        raise ApiClientError.decode_failed() from e
