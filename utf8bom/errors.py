"""Failure signals raised by the detection and normalization stages."""

from __future__ import annotations

from typing import Optional


class NormalizationError(Exception):
    """Base class; ``stage`` names the pipeline step that failed."""

    stage = "normalize"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class DetectionFailed(NormalizationError):
    """The buffer could not be read or the statistical pass could not run."""

    stage = "detect"


class DecodeFailed(NormalizationError):
    """The candidate encoding could not strictly decode the buffer."""

    stage = "decode"

    def __init__(self, message: str, path: Optional[str] = None, encoding: Optional[str] = None):
        super().__init__(message, path)
        self.encoding = encoding


class WriteFailed(NormalizationError):
    """The normalized bytes could not replace the file on disk."""

    stage = "write"
