"""
Request/response schemas for the explanation service.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class SolveDoubtRequest(BaseModel):
    # Optional here so an absent question maps to 400 "Question is required", not a 422
    question: str | None = Field(default=None, description="The doubt to explain")
    subject: str | None = Field(default=None, description="Short label, e.g. 'Physics'; defaults to 'General'")


class SolveDoubtResponse(BaseModel):
    explanation: str
    example: str = ""


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
