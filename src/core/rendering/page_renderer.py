"""
Page Renderer
=============

Playwright-based capture of a single render descriptor as PNG, JPEG or PDF.
Each render runs in its own browser context which is closed on every exit path.
"""

from typing import Optional, Dict, Any
import asyncio
import time

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from src.config.logging import get_logger
from src.config.settings import Settings, get_settings
from src.core.exceptions import (
    CaptureError,
    DescriptorValidationError,
    EngineFatalError,
    NavigationError,
    ScriptError,
    SelectorError,
)
from src.models.schemas import Artifact, OutputType, RenderDescriptor, Viewport

logger = get_logger(__name__)

SET_VIEWPORT_BINDING = "__renderSetViewport"

# Gives descriptor scripts a `page` handle whose calls are routed back to the engine.
PAGE_API_SCRIPT = """
() => {
  if (typeof window.page?.setViewport !== 'function') {
    window.page = {
      setViewport: (viewport) => window.%s(viewport),
    };
  }
}
""" % SET_VIEWPORT_BINDING


class PageRenderer:
    """Renders one descriptor to one artifact on a shared browser session.

    Scripts run with the page's own privileges. Callers own the scripts they
    send; nothing beyond the browser context's isolation contains them.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="page_renderer")  # structlog.BoundLoggerBase

    async def render(self, descriptor: RenderDescriptor, session: Browser) -> Artifact:
        """
        Render a single page descriptor.

        Args:
            descriptor: Validated png, jpeg or pdf descriptor
            session: Live browser from the session manager

        Returns:
            Artifact with the rendered bytes and content type

        Raises:
            NavigationError: If the page cannot be loaded
            ScriptError: If the descriptor script fails
            SelectorError: If the selector does not match a visible element
            CaptureError: If the screenshot or PDF cannot be produced
            EngineFatalError: If no browser context can be opened
        """
        output_type = descriptor.output_type
        if output_type is None or output_type is OutputType.ZIP:
            raise DescriptorValidationError(
                f"Cannot render output type {output_type} as a single page"
            )

        started = time.perf_counter()
        viewport = descriptor.viewport or Viewport(
            width=self.settings.default_viewport_width,
            height=self.settings.default_viewport_height,
        )
        self.logger.info(
            "Rendering page",
            output_type=output_type.value,
            source="url" if descriptor.url is not None else "content",
            width=viewport.width,
            height=viewport.height,
        )

        context = await self._open_context(session, viewport)
        try:
            page = await context.new_page()
            page.set_default_timeout(self.settings.navigation_timeout)

            await self._load(page, descriptor)

            if descriptor.script:
                await self._run_script(page, descriptor.script)

            element = None
            if descriptor.selector:
                element = await self._resolve_selector(page, descriptor.selector)

            data = await self._capture(page, descriptor, element)
            final_viewport = page.viewport_size
        finally:
            await self._close_context(context)

        duration_ms = round((time.perf_counter() - started) * 1000)
        self.logger.info(
            "Page rendered",
            output_type=output_type.value,
            size=len(data),
            duration_ms=duration_ms,
        )

        return Artifact(
            data=data,
            content_type=output_type.content_type,
            metadata={
                "output_type": output_type.value,
                "viewport": final_viewport,
                "selector": descriptor.selector,
                "full_page": descriptor.full_page,
                "duration_ms": duration_ms,
            },
        )

    async def _open_context(self, session: Browser, viewport: Viewport) -> BrowserContext:
        try:
            return await session.new_context(
                viewport={"width": viewport.width, "height": viewport.height},
            )
        except PlaywrightError as e:
            self.logger.error("Failed to open browser context", error=str(e))
            raise EngineFatalError(f"Could not open a browser context: {e.message}")

    async def _close_context(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except PlaywrightError as e:
            # The browser may already be gone; the session manager notices on next acquire.
            self.logger.warning("Failed to close browser context", error=str(e))

    async def _load(self, page: Page, descriptor: RenderDescriptor) -> None:
        """Navigate to the URL or inject the markup."""
        wait_until = self.settings.navigation_wait_until
        timeout = self.settings.navigation_timeout

        try:
            if descriptor.url is not None:
                await page.goto(descriptor.url, wait_until=wait_until, timeout=timeout)
            else:
                await page.set_content(descriptor.content or "", wait_until=wait_until, timeout=timeout)
        except PlaywrightTimeoutError as e:
            self.logger.warning("Page load timed out", url=descriptor.url, timeout=timeout)
            raise NavigationError(f"Page did not finish loading within {timeout} ms: {e.message}")
        except PlaywrightError as e:
            self.logger.warning("Page load failed", url=descriptor.url, error=str(e))
            raise NavigationError(f"Page could not be loaded: {e.message}")

    async def _run_script(self, page: Page, script: str) -> None:
        """Evaluate the descriptor script inside the page."""
        timeout = self.settings.script_timeout

        async def set_viewport(viewport: Dict[str, Any]) -> None:
            size = _parse_viewport(viewport)
            await page.set_viewport_size(size)
            self.logger.debug("Viewport changed by script", **size)

        try:
            await page.expose_function(SET_VIEWPORT_BINDING, set_viewport)
            await page.evaluate(PAGE_API_SCRIPT)
            await asyncio.wait_for(page.evaluate(script), timeout=timeout / 1000)
        except asyncio.TimeoutError:
            self.logger.warning("Script timed out", timeout=timeout)
            raise ScriptError(f"Script did not finish within {timeout} ms")
        except PlaywrightError as e:
            self.logger.warning("Script failed", error=str(e))
            raise ScriptError(f"Script failed: {e.message}")

    async def _resolve_selector(self, page: Page, selector: str) -> ElementHandle:
        """Find the element to crop to."""
        try:
            element = await page.wait_for_selector(
                selector, state="attached", timeout=self.settings.selector_timeout
            )
        except PlaywrightTimeoutError:
            raise SelectorError(f"No element matches selector '{selector}'")
        except PlaywrightError as e:
            raise SelectorError(f"Invalid selector '{selector}': {e.message}")

        if element is None:
            raise SelectorError(f"No element matches selector '{selector}'")

        box = await element.bounding_box()
        if not box or box["width"] <= 0 or box["height"] <= 0:
            raise SelectorError(f"Element matching '{selector}' has no visible bounding box")

        return element

    async def _capture(
        self, page: Page, descriptor: RenderDescriptor, element: Optional[ElementHandle]
    ) -> bytes:
        """Produce the artifact bytes for the descriptor's output type."""
        output_type = descriptor.output_type

        try:
            if output_type is OutputType.PDF:
                return await page.pdf(print_background=self.settings.pdf_print_background)

            options: Dict[str, Any] = {"type": output_type.value}
            if output_type is OutputType.JPEG and descriptor.jpeg_quality is not None:
                options["quality"] = descriptor.jpeg_quality

            if element is not None:
                return await element.screenshot(timeout=self.settings.selector_timeout, **options)

            return await page.screenshot(full_page=descriptor.full_page, **options)
        except PlaywrightError as e:
            self.logger.error("Capture failed", output_type=output_type.value, error=str(e))
            raise CaptureError(f"Failed to capture {output_type.value}: {e.message}")


def _parse_viewport(viewport: Any) -> Dict[str, int]:
    """Validate a viewport passed from page scripts."""
    if not isinstance(viewport, dict):
        raise ValueError("setViewport expects an object with width and height")

    size = Viewport.model_validate(
        {"width": viewport.get("width"), "height": viewport.get("height")}
    )
    return {"width": size.width, "height": size.height}
