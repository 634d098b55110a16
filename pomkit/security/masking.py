"""
Secret masking implementation.

The resolver registers every password it hands out as a known secret, so
even a password echoed by a page object or a failed assertion message is
masked before it reaches the console or a log file.
"""

from __future__ import annotations

import re
import threading
from re import Pattern

from .patterns import DEFAULT_PATTERNS


class SecretMasker:
    """
    Detect and mask secrets in strings.

    Example:
        masker = SecretMasker()
        masker.mask("password=Assetuse@1")
        # "password=[MASKED]"

        masker.add_known_secret("Assetuse@1")
        masker.mask("typed Assetuse@1 into the field")
        # "typed [MASKED] into the field"
    """

    DEFAULT_MASK = "[MASKED]"
    MIN_SECRET_LENGTH = 4

    def __init__(
        self,
        *,
        patterns: list[str] | None = None,
        mask: str = DEFAULT_MASK,
        enabled: bool = True,
    ):
        """
        Initialize the masker.

        Args:
            patterns: Regex patterns for detection (default: DEFAULT_PATTERNS)
            mask: Replacement string for secrets
            enabled: Whether masking is enabled
        """
        self._mask = mask
        self._enabled = enabled
        self._patterns: list[Pattern[str]] = []
        self._known_secrets: set[str] = set()
        self._lock = threading.Lock()

        for pattern in patterns if patterns is not None else DEFAULT_PATTERNS:
            self.add_pattern(pattern)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    @property
    def mask_string(self) -> str:
        return self._mask

    @property
    def known_secret_count(self) -> int:
        return len(self._known_secrets)

    def add_pattern(self, pattern: str) -> None:
        """
        Add a regex pattern for secret detection.

        Raises:
            re.error: If the pattern is invalid
        """
        self._patterns.append(re.compile(pattern))

    def add_known_secret(self, secret: str | None) -> None:
        """
        Add a known secret value to be masked.

        Values shorter than MIN_SECRET_LENGTH are ignored, since masking them
        would garble unrelated text.
        """
        if secret and len(secret) >= self.MIN_SECRET_LENGTH:
            with self._lock:
                self._known_secrets.add(secret)

    def remove_known_secret(self, secret: str) -> None:
        with self._lock:
            self._known_secrets.discard(secret)

    def clear_known_secrets(self) -> None:
        with self._lock:
            self._known_secrets.clear()

    def mask(self, text: str) -> str:
        """
        Mask secrets in the given text.

        Known secrets are replaced first, longest first, so a secret that
        contains another known secret is masked as a whole.
        """
        if not self._enabled or not text:
            return text

        with self._lock:
            secrets = sorted(self._known_secrets, key=len, reverse=True)

        result = text
        for secret in secrets:
            if secret in result:
                result = result.replace(secret, self._mask)

        for pattern in self._patterns:
            result = self._mask_pattern(result, pattern)

        return result

    def _mask_pattern(self, text: str, pattern: Pattern[str]) -> str:
        def replacer(match: re.Match[str]) -> str:
            secret_value = next((g for g in reversed(match.groups()) if g), None)
            if not secret_value or secret_value == self._mask:
                return match.group(0)
            return match.group(0).replace(secret_value, self._mask)

        return pattern.sub(replacer, text)

    def is_secret(self, text: str) -> bool:
        """Check if the text is a known secret or matches a secret pattern."""
        if not text:
            return False
        if text in self._known_secrets:
            return True
        return any(pattern.search(text) for pattern in self._patterns)


_global_masker: SecretMasker | None = None


def get_masker() -> SecretMasker:
    """Get or create the global masker instance."""
    global _global_masker

    if _global_masker is None:
        _global_masker = SecretMasker()

    return _global_masker


def reset_masker() -> None:
    """Reset the global masker instance."""
    global _global_masker
    _global_masker = None
