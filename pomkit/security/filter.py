"""
Logging filter for secret masking.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .masking import SecretMasker


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks secrets in log records.

    The message is rendered with its arguments before masking, so a secret
    passed as a %-style argument is masked as well. Extra fields attached by
    pomkit.log.Logger are masked too.

    Example:
        handler.addFilter(SecretMaskingFilter(get_masker()))
        lg.info("login with password=%s", "Assetuse@1")
        # login with password=[MASKED]
    """

    def __init__(self, masker: SecretMasker | None = None, name: str = ""):
        """
        Args:
            masker: SecretMasker instance (default: global masker, looked up lazily)
            name: Filter name for logging hierarchy
        """
        super().__init__(name)
        self._masker = masker

    @property
    def masker(self) -> SecretMasker:
        if self._masker is None:
            from .masking import get_masker

            return get_masker()
        return self._masker

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask secrets in the record. Always lets the record through."""
        masker = self.masker

        if record.args:
            record.msg = record.getMessage()
            record.args = None
        if record.msg:
            record.msg = masker.mask(str(record.msg))

        extra = getattr(record, "__pomkit__extra", None)
        if extra:
            for key, value in extra.items():
                if isinstance(value, str):
                    extra[key] = masker.mask(value)

        if record.exc_text:
            record.exc_text = masker.mask(record.exc_text)

        return True
