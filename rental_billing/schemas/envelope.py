"""Response envelopes shared by every REST endpoint."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope: HTTP-style code, payload and a human readable message."""

    code: int
    data: DataT
    message: str


class ApiError(BaseModel):
    """Failure envelope."""

    code: int
    message: str
