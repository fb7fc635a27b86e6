"""
Charset detection.

The statistical guess comes from charset-normalizer; what this module owns is
the policy deciding whether that guess is trusted, and the BOM check, which
never depends on the guess.
"""

from __future__ import annotations

import codecs
import logging
from typing import Callable, Optional

from charset_normalizer import from_bytes

from .errors import DetectionFailed
from .logs import get_logger
from .models import EncodingVerdict, RawGuess
from .rules import DEFAULT_FALLBACK_ENCODING, TRUSTED_CONFIDENCE, TRUSTED_PREFIX, UTF8_BOM

Guesser = Callable[[bytes], RawGuess]

log = get_logger(__name__)

_WIDE_BOMS = (
    codecs.BOM_UTF32_LE,
    codecs.BOM_UTF32_BE,
    codecs.BOM_UTF16_LE,
    codecs.BOM_UTF16_BE,
)


def _is_strict_utf8(raw: bytes) -> bool:
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def _plausible(encoding: str, raw: bytes) -> bool:
    # UTF-16/32 without a BOM is only believable when the buffer holds NUL bytes.
    try:
        name = codecs.lookup(encoding).name
    except LookupError:
        return False
    if name.startswith(("utf-16", "utf-32")):
        return raw.startswith(_WIDE_BOMS) or b"\x00" in raw
    return True


def charset_normalizer_guess(raw: bytes) -> RawGuess:
    """Guess the encoding of ``raw``.

    Structural checks come first and are certain: a UTF-8 BOM followed by
    valid UTF-8 is UTF-8, and NUL-free bytes that decode as UTF-8 are UTF-8
    (or ASCII). Only the remaining buffers go to charset-normalizer, whose
    best match is scored ``1 - chaos`` divided by the number of distinct
    codecs that could also have produced the buffer. A full score therefore
    means an unambiguous answer, not merely a clean decode.
    """
    if has_utf8_bom(raw) and _is_strict_utf8(raw[3:]):
        return RawGuess(name="utf_8", confidence=1.0)
    if not has_utf8_bom(raw) and b"\x00" not in raw and _is_strict_utf8(raw):
        return RawGuess(name="ascii" if raw.isascii() else "utf_8", confidence=1.0)

    viable = [m for m in from_bytes(raw) if _plausible(m.encoding, raw)]
    if not viable:
        return RawGuess()

    best = viable[0]
    candidates = {best.encoding}
    for match in viable:
        candidates.update(e for e in match.could_be_from_charset if _plausible(e, raw))

    confidence = min(max(1.0 - best.chaos, 0.0), 1.0) / len(candidates)
    return RawGuess(name=best.encoding, confidence=confidence)


def select_candidate(
    name: Optional[str],
    confidence: float,
    fallback: str = DEFAULT_FALLBACK_ENCODING,
    trusted_confidence: float = TRUSTED_CONFIDENCE,
) -> str:
    """Apply the confidence/override policy to a raw guess.

    Any UTF-family guess is trusted outright, as is a guess at or above
    ``trusted_confidence``. Everything else, including no guess at all,
    becomes ``fallback``.
    """
    if name and (confidence >= trusted_confidence or name.lower().startswith(TRUSTED_PREFIX)):
        return name
    return fallback


def has_utf8_bom(raw: bytes) -> bool:
    return raw[:3] == UTF8_BOM


def detect(
    raw: bytes,
    guesser: Optional[Guesser] = None,
    fallback: str = DEFAULT_FALLBACK_ENCODING,
    trusted_confidence: float = TRUSTED_CONFIDENCE,
    logger: Optional[logging.Logger] = None,
) -> EncodingVerdict:
    """Produce the verdict the normalizer acts on.

    Empty input never reaches the statistical pass and yields the fallback
    encoding with zero confidence. Any exception raised by the guesser is
    reported as :class:`DetectionFailed`.
    """
    logger = logger or log
    if not raw:
        logger.info("Empty buffer, using fallback %s", fallback)
        return EncodingVerdict(encoding=fallback, confidence=0.0, has_bom=False)

    guesser = guesser or charset_normalizer_guess
    try:
        guess = guesser(bytes(raw))
    except Exception as exc:
        raise DetectionFailed(f"statistical pass failed: {exc}") from exc

    logger.info("Detected %s %.2f", guess.name, guess.confidence)
    candidate = select_candidate(guess.name, guess.confidence, fallback, trusted_confidence)
    if candidate != guess.name:
        logger.debug("Guess %s not trusted, falling back to %s", guess.name, candidate)

    return EncodingVerdict(
        encoding=candidate,
        confidence=guess.confidence if guess.name else 0.0,
        has_bom=has_utf8_bom(raw),
    )
