"""Shared response envelopes."""
from __future__ import annotations

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


__all__ = ["SuccessResponse"]
