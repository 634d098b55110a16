"""
Secret masking for log output.

Example:
    from pomkit.security import get_masker

    masker = get_masker()
    masker.add_known_secret(credentials.password)
    safe_text = masker.mask(f"logged in with {credentials.password}")
"""

from .filter import SecretMaskingFilter
from .masking import SecretMasker, get_masker, reset_masker
from .patterns import DEFAULT_PATTERNS, PATTERN_NAMES

__all__ = [
    "SecretMasker",
    "SecretMaskingFilter",
    "get_masker",
    "reset_masker",
    "DEFAULT_PATTERNS",
    "PATTERN_NAMES",
]
