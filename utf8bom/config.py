"""
Runtime settings.

Every value has a default that matches the tool's documented behaviour;
UTF8BOM_* environment variables override them.
"""

from __future__ import annotations

import codecs
import os
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .rules import (
    DEFAULT_FALLBACK_ENCODING,
    DEFAULT_TEXT_KINDS,
    ENV_PREFIX,
    TRUSTED_CONFIDENCE,
)


class NormalizerSettings(BaseModel):
    fallback_encoding: str = Field(
        default=DEFAULT_FALLBACK_ENCODING,
        description="Encoding used when the detector's guess is not trusted",
    )
    trusted_confidence: float = Field(default=TRUSTED_CONFIDENCE, ge=0.0, le=1.0)
    text_document_kinds: List[str] = Field(default_factory=lambda: list(DEFAULT_TEXT_KINDS))
    log_file: Optional[Path] = None

    @field_validator("fallback_encoding")
    @classmethod
    def validate_fallback_encoding(cls, v: str) -> str:
        """Reject names Python has no codec for."""
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"unknown encoding: {v}") from None
        return v


def load_settings(environ: Optional[Mapping[str, str]] = None) -> NormalizerSettings:
    env = os.environ if environ is None else environ
    values = {}

    fallback = env.get(f"{ENV_PREFIX}FALLBACK_ENCODING")
    if fallback:
        values["fallback_encoding"] = fallback

    threshold = env.get(f"{ENV_PREFIX}TRUSTED_CONFIDENCE")
    if threshold:
        values["trusted_confidence"] = threshold

    kinds = env.get(f"{ENV_PREFIX}TEXT_KINDS")
    if kinds:
        values["text_document_kinds"] = [k.strip() for k in kinds.split(",") if k.strip()]

    log_file = env.get(f"{ENV_PREFIX}LOG_FILE")
    if log_file:
        values["log_file"] = log_file

    return NormalizerSettings(**values)
