"""
Automation Session
==================

Owns the single headless browser connection shared by every request in the
process. The browser is launched lazily, checked for liveness before reuse and
relaunched when it has died. Access is not serialized; each render opens its
own browser context on the shared session.
"""

from typing import Any, Optional

from playwright.async_api import async_playwright, Browser, Playwright

from src.config.logging import get_logger
from src.config.settings import Settings, get_settings
from src.core.exceptions import EngineFatalError

logger = get_logger(__name__)


class AutomationSessionManager:
    """Lazy, self-healing holder of one Playwright browser."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self.launch_count = 0
        self.logger: Any = logger.bind(component="session_manager")  # structlog.BoundLoggerBase

    @property
    def is_live(self) -> bool:
        """Whether a connected browser is currently held."""
        return self._browser is not None and self._browser.is_connected()

    async def acquire(self) -> Browser:
        """
        Return a live automation session, launching one if needed.

        Raises:
            EngineFatalError: If the browser cannot be started
        """
        browser = self._browser
        if browser is not None:
            if browser.is_connected():
                return browser
            self.logger.warning("Automation session is no longer connected, relaunching")
            if self._browser is browser:
                self._browser = None

        return await self._launch()

    async def shutdown(self) -> None:
        """Close the browser and stop the Playwright driver."""
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        try:
            if browser is not None and browser.is_connected():
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()

        self.logger.info("Automation session shut down")

    async def _launch(self) -> Browser:
        try:
            playwright = await self._ensure_playwright()
            browser = await playwright.chromium.launch(
                headless=self.settings.playwright_headless,
                args=self.settings.browser_args,
            )
        except Exception as e:
            self.logger.error("Failed to launch automation session", error=str(e))
            if self._browser is None:
                await self._reset_playwright()
            raise EngineFatalError(f"Automation session could not be started: {e}")

        # Concurrent callers may race to relaunch; keep the session already installed.
        current = self._browser
        if current is not None and current.is_connected():
            self.logger.info("Discarding surplus automation session from relaunch race")
            await browser.close()
            return current

        browser.on("disconnected", self._on_disconnected)
        self._browser = browser
        self.launch_count += 1
        self.logger.info(
            "Automation session launched",
            browser_version=browser.version,
            launch_count=self.launch_count,
        )
        return browser

    async def _ensure_playwright(self) -> Playwright:
        if self._playwright is None:
            playwright = await async_playwright().start()
            if self._playwright is None:
                self._playwright = playwright
            else:
                await playwright.stop()
        return self._playwright

    async def _reset_playwright(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is None:
            return
        try:
            await playwright.stop()
        except Exception as e:
            self.logger.warning("Failed to stop Playwright driver", error=str(e))

    def _on_disconnected(self, browser: Browser) -> None:
        if self._browser is browser:
            self._browser = None
            self.logger.warning("Automation session disconnected")
