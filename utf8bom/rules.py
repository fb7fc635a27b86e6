"""
Deterministic normalization rules.

This file exists to make the target encoding and the detection policy explicit.
"""

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM
UTF8_BOM = b"\xef\xbb\xbf"

# Used whenever the detector's guess is not trusted.
DEFAULT_FALLBACK_ENCODING = "gb18030"

# A raw guess is trusted at or above this confidence, or when it names a UTF codec.
TRUSTED_CONFIDENCE = 1.0
TRUSTED_PREFIX = "utf"

# Document kind reported by Visual Studio for text editor documents.
TEXT_DOCUMENT_KIND = "{8E7B96A8-E33D-11D0-A6D5-00C04FB67F6A}"
DEFAULT_TEXT_KINDS = (TEXT_DOCUMENT_KIND, "text")

ENV_PREFIX = "UTF8BOM_"
LOGGER_NAME = "utf8bom"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 3
