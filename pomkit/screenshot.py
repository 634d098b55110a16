"""
Screenshot file management.

ScreenshotHelper names, stores and cleans up screenshots. Capturing is
delegated to a page object that offers ``screenshot(path=..., full_page=...)``
and ``locator(selector).screenshot(path=...)``, the Playwright page API;
no browser library is imported here.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Protocol

from pomkit.exceptions import ScreenshotError
from pomkit.helpers import sanitize_filename, timestamp
from pomkit.log import Logger, get_logger

DEFAULT_SCREENSHOT_DIR = "screenshots"
SECONDS_PER_DAY = 24 * 60 * 60


class Page(Protocol):
    """The subset of a browser page used for screenshots."""

    def screenshot(self, *, path: str, full_page: bool = ...) -> Any: ...

    def locator(self, selector: str) -> Any: ...


class ScreenshotHelper:
    """
    Captures screenshots into a (run-scoped) screenshot directory.

    File names are ``<sanitized name>_<timestamp>.png``, with a numeric
    suffix when that name is already taken.

    Example:
        helper = ScreenshotHelper()
        helper.set_run_directory("test-runs/2024-03-07_09-05-01")
        helper.capture(page, "Home page")
        # test-runs/2024-03-07_09-05-01/screenshots/home_page_2024-03-07T09-05-03-117Z.png
    """

    def __init__(
        self,
        directory: str | Path = DEFAULT_SCREENSHOT_DIR,
        logger: Logger | None = None,
    ):
        self._dir = Path(directory)
        self._lg = logger or get_logger("screenshot")

    @property
    def directory(self) -> Path:
        return self._dir

    def set_run_directory(self, run_dir: str | Path) -> None:
        """Store screenshots under <run_dir>/screenshots from now on."""
        self._dir = Path(run_dir) / DEFAULT_SCREENSHOT_DIR
        self.init()
        self._lg.info(f"screenshots will be saved to: {self._dir}")

    def init(self) -> None:
        """Create the screenshot directory if it does not exist."""
        if not self._dir.exists():
            self._dir.mkdir(parents=True, exist_ok=True)
            self._lg.info(f"created screenshots directory: {self._dir}")

    def _target(self, name: str, prefix: str = "") -> Path:
        """
        Next free file name for a capture.

        A capture that lands on an existing name (same name within the same
        millisecond) gets a numeric suffix: ``<name>_<timestamp>_1.png``.
        """
        self.init()
        stem = f"{prefix}{sanitize_filename(name)}_{timestamp()}"
        path = self._dir / f"{stem}.png"
        counter = 1
        while path.exists():
            path = self._dir / f"{stem}_{counter}.png"
            counter += 1
        return path

    def capture(self, page: Page, name: str, full_page: bool = True) -> Path:
        """
        Capture a page screenshot.

        Returns:
            Path of the written file

        Raises:
            ScreenshotError: If the page fails to take the screenshot
        """
        path = self._target(name)
        try:
            page.screenshot(path=str(path), full_page=full_page)
        except Exception as e:
            self._lg.error(f"failed to capture screenshot: {e}")
            raise ScreenshotError(f"Failed to capture screenshot: {e}", file=str(path)) from e

        self._lg.info(f"screenshot captured: {path}")
        return path

    def capture_on_failure(self, page: Page, test_name: str) -> Path:
        self._lg.warning(f"test failed: {test_name}. capturing screenshot")
        return self.capture(page, f"FAILED_{test_name}", full_page=True)

    def capture_element(self, page: Page, selector: str, name: str) -> Path:
        """
        Capture a screenshot of the element matching selector.

        Raises:
            ScreenshotError: If the element screenshot fails
        """
        path = self._target(name, prefix="element_")
        try:
            page.locator(selector).screenshot(path=str(path))
        except Exception as e:
            self._lg.error(f"failed to capture element screenshot: {e}")
            raise ScreenshotError(
                f"Failed to capture element screenshot: {e}",
                file=str(path),
                selector=selector,
            ) from e

        self._lg.info(f"element screenshot captured: {path}")
        return path

    def capture_flow(self, page: Page, test_name: str, step: str) -> Path:
        """Capture a viewport screenshot for one step of a test flow."""
        return self.capture(page, f"{test_name}_step_{step}", full_page=False)

    def clean_old(self, days: float = 7) -> int:
        """
        Delete screenshots last modified more than ``days`` days ago.

        Returns:
            Number of files deleted
        """
        if not self._dir.exists():
            return 0

        cutoff = time.time() - days * SECONDS_PER_DAY
        deleted = 0
        for path in self._dir.iterdir():
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink()
                deleted += 1
                self._lg.info(f"deleted old screenshot: {path.name}")
        return deleted
