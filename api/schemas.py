# api/schemas.py

from typing import List, Optional
from pydantic import BaseModel


class SpanSchema(BaseModel):
    start: int
    end: int


class VerifiedSchema(BaseModel):
    start: int
    end: int
    label: Optional[str] = None


class NamesRequest(BaseModel):
    text: str
    sentences: Optional[List[SpanSchema]] = None  # segmented server-side if omitted
    tokens: Optional[List[SpanSchema]] = None
    verified: List[VerifiedSchema] = []
    model: Optional[str] = None


class EntitySchema(BaseModel):
    start: int
    end: int
    text: str
    label: Optional[str] = None
    probability: float
    verified: bool


class IssueSchema(BaseModel):
    kind: str
    message: str
    start: Optional[int] = None
    end: Optional[int] = None


class NamesResponse(BaseModel):
    status: str
    entities: List[EntitySchema]
    issues: List[IssueSchema] = []
