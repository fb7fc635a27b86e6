"""
Core normalization logic.

Responsibilities:
- decide whether a verdict needs conversion (UTF-8 with BOM is left alone)
- strict decode + re-encode to UTF-8 with BOM
- replace the file in one step, never leaving a partial write behind
"""

from __future__ import annotations

import codecs
import hashlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Tuple, Union

from .errors import DecodeFailed, WriteFailed
from .logs import get_logger
from .models import ConversionDecision, EncodingVerdict
from .rules import TARGET_ENCODING

log = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _canonical(encoding: str) -> Optional[str]:
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        return None


def decide(verdict: EncodingVerdict) -> ConversionDecision:
    if verdict.has_bom and _canonical(verdict.encoding) in ("utf-8", "utf-8-sig"):
        return ConversionDecision.SKIP
    return ConversionDecision.CONVERT


def transcode(raw: bytes, encoding: str) -> bytes:
    """
    Decode ``raw`` strictly as ``encoding`` and return UTF-8 bytes with a BOM.

    Rules:
    - Invalid bytes are never replaced; they raise DecodeFailed.
    - A BOM already carried by the source (decoded as U+FEFF) is not doubled.
    """
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise DecodeFailed(
            f"bytes {exc.start}-{exc.end} are not valid {encoding}", encoding=encoding
        ) from exc
    except LookupError as exc:
        raise DecodeFailed(f"unknown encoding {encoding}", encoding=encoding) from exc

    if text.startswith("\ufeff"):
        text = text[1:]

    return text.encode(TARGET_ENCODING)


def write_atomic(path: PathLike, data: bytes) -> None:
    """Replace the file at ``path`` with ``data`` via a sibling temp file and os.replace.

    Symlinks are followed, so the link stays a link and its target is
    rewritten. The replacement is a new inode: hard links to the old file keep
    the old content, ownership reverts to the writing user, and only the
    permission bits are carried over. The containing directory must be
    writable even when the file itself is.
    """
    target = Path(path).resolve()
    try:
        fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    except OSError as exc:
        raise WriteFailed(f"cannot create temp file next to {target}: {exc}", str(target)) from exc

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if target.exists():
            shutil.copymode(target, tmp_path)
        os.replace(tmp_path, target)
    except OSError as exc:
        raise WriteFailed(f"cannot write {target}: {exc}", str(target)) from exc
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


def apply_verdict(
    path: PathLike,
    raw: bytes,
    verdict: EncodingVerdict,
    logger: Optional[logging.Logger] = None,
) -> Tuple[ConversionDecision, Optional[bytes]]:
    """Like :func:`normalize`, also returning the bytes written (None on skip)."""
    logger = logger or log
    decision = decide(verdict)
    if decision is ConversionDecision.SKIP:
        logger.info("Already UTF-8 with BOM, skipped")
        return decision, None

    try:
        data = transcode(raw, verdict.encoding)
    except DecodeFailed as exc:
        exc.path = str(path)
        raise

    write_atomic(path, data)
    logger.info("Converted %s from %s to UTF-8 with BOM", path, verdict.encoding)
    return decision, data


def normalize(
    path: PathLike,
    raw: bytes,
    verdict: EncodingVerdict,
    logger: Optional[logging.Logger] = None,
) -> ConversionDecision:
    decision, _ = apply_verdict(path, raw, verdict, logger)
    return decision
