"""
Save-hook pipeline: read -> detect -> normalize, one file at a time.

The file is read and closed before any write happens; nothing is locked in
between, so a concurrent writer touching the same file in that window can
lose its change.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from .config import NormalizerSettings, load_settings
from .detect import Guesser, detect
from .errors import DetectionFailed, NormalizationError
from .logs import get_logger
from .models import ConversionDecision, DocumentSaved, NormalizationReport
from .normalize import sha256_hex, apply_verdict

log = get_logger(__name__)


def normalize_file(
    path: Union[str, os.PathLike],
    settings: Optional[NormalizerSettings] = None,
    guesser: Optional[Guesser] = None,
    logger: Optional[logging.Logger] = None,
) -> NormalizationReport:
    """Normalize one file in place.

    Raises the typed :class:`NormalizationError` subclasses; a diagnostic line
    naming the failed stage is logged before the error propagates.
    """
    settings = settings or load_settings()
    logger = logger or log
    path = str(path)

    try:
        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise DetectionFailed(f"cannot read {path}: {exc}", path) from exc

        try:
            verdict = detect(
                raw,
                guesser=guesser,
                fallback=settings.fallback_encoding,
                trusted_confidence=settings.trusted_confidence,
                logger=logger,
            )
        except DetectionFailed as exc:
            exc.path = path
            raise

        logger.info(
            "Verdict %s confidence %.2f withBOM %s",
            verdict.encoding,
            verdict.confidence,
            verdict.has_bom,
        )
        decision, written = apply_verdict(path, raw, verdict, logger)
    except NormalizationError as exc:
        logger.error("%s stage failed for %s: %s", exc.stage, path, exc)
        raise

    if written is None:
        return NormalizationReport(
            path=path, decision=decision, verdict=verdict, reason="already_utf8_bom"
        )
    return NormalizationReport(
        path=path,
        decision=decision,
        verdict=verdict,
        bytes_written=len(written),
        sha256=sha256_hex(written),
    )


def handle_document_saved(
    event: DocumentSaved,
    settings: Optional[NormalizerSettings] = None,
    guesser: Optional[Guesser] = None,
    logger: Optional[logging.Logger] = None,
) -> NormalizationReport:
    """Entry point for host save events.

    Non-text documents are reported and left alone. Normalization failures
    come back as an ``error`` report instead of escaping into the host.
    """
    settings = settings or load_settings()
    logger = logger or log
    logger.info("Document saved %s %s", event.kind, event.path)

    if event.kind not in settings.text_document_kinds:
        logger.info("Not text file, skipped")
        return NormalizationReport(
            path=event.path, decision=ConversionDecision.SKIP, reason="not_text"
        )

    if not os.path.isabs(event.path):
        raise ValueError(f"save events must carry an absolute path, got {event.path!r}")

    try:
        return normalize_file(event.path, settings=settings, guesser=guesser, logger=logger)
    except NormalizationError as exc:
        return NormalizationReport(
            path=event.path,
            decision=ConversionDecision.ERROR,
            error_stage=exc.stage,
            error=str(exc),
        )
