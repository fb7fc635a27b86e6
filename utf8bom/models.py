from __future__ import annotations

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ConversionDecision(str, Enum):
    SKIP = "skip"
    CONVERT = "convert"
    ERROR = "error"


class RawGuess(BaseModel):
    """Output of the statistical pass, before the confidence policy is applied."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class EncodingVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    encoding: str = Field(examples=["utf_8", "gb18030"])
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    has_bom: bool = False


class DocumentSaved(BaseModel):
    path: str
    kind: str = Field(default="text")


class NormalizationReport(BaseModel):
    path: str
    decision: ConversionDecision
    verdict: Optional[EncodingVerdict] = None
    reason: Optional[str] = Field(default=None, examples=["already_utf8_bom", "not_text"])
    error_stage: Optional[str] = None
    error: Optional[str] = None
    bytes_written: Optional[int] = None
    sha256: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool = True
