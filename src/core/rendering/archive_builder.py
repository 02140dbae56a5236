"""
Archive Builder
===============

Renders the pages of a zip descriptor one after another and packages the
results into a single archive whose entries follow the input order.
"""

from typing import Any, List, Optional, Sequence
import io
import time
import zipfile

from src.config.logging import get_logger
from src.core.exceptions import BatchRenderError, DescriptorValidationError
from src.core.rendering.page_renderer import PageRenderer
from src.core.session import AutomationSessionManager
from src.models.schemas import Artifact, OutputType, RenderDescriptor

logger = get_logger(__name__)


def entry_names(pages: Sequence[RenderDescriptor]) -> List[str]:
    """
    Archive entry name for each page, in order.

    Pages without ``saveFilename`` are named ``<index>.<extension>``.

    Raises:
        DescriptorValidationError: If two entries would share a name
    """
    names: List[str] = []
    seen = set()
    for index, page in enumerate(pages):
        name = page.save_filename or f"{index}.{page.output_type.extension}"
        if name in seen:
            raise DescriptorValidationError(f"pages[{index}]: duplicate archive entry name '{name}'")
        seen.add(name)
        names.append(name)
    return names


class ArchiveBuilder:
    """Sequential batch renderer producing zip archives."""

    def __init__(
        self,
        session_manager: AutomationSessionManager,
        renderer: Optional[PageRenderer] = None,
    ):
        self.session_manager = session_manager
        self.renderer = renderer or PageRenderer(session_manager.settings)
        self.logger: Any = logger.bind(component="archive_builder")  # structlog.BoundLoggerBase

    async def render_batch(self, pages: Sequence[RenderDescriptor]) -> Artifact:
        """
        Render every page and return the zip archive.

        Args:
            pages: Page descriptors in the order their entries should appear

        Returns:
            Artifact holding the zip bytes

        Raises:
            DescriptorValidationError: If an entry is not a renderable single page
            BatchRenderError: If any page fails to render
        """
        self._check_pages(pages)
        names = entry_names(pages)

        started = time.perf_counter()
        self.logger.info("Rendering batch", pages=len(pages))

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for index, (page, name) in enumerate(zip(pages, names)):
                try:
                    session = await self.session_manager.acquire()
                    artifact = await self.renderer.render(page, session)
                except Exception as e:
                    self.logger.error("Batch entry failed", index=index, entry=name, error=str(e))
                    raise BatchRenderError(index, e) from e

                archive.writestr(name, artifact.data)

        data = buffer.getvalue()
        self.logger.info(
            "Batch rendered",
            pages=len(pages),
            size=len(data),
            duration_ms=round((time.perf_counter() - started) * 1000),
        )

        return Artifact(
            data=data,
            content_type=OutputType.ZIP.content_type,
            metadata={"entries": names},
        )

    def _check_pages(self, pages: Sequence[RenderDescriptor]) -> None:
        if not pages:
            raise DescriptorValidationError("A zip request requires a non-empty 'pages' list")

        for index, page in enumerate(pages):
            if page.output_type is None or page.output_type is OutputType.ZIP:
                raise DescriptorValidationError(
                    f"pages[{index}]: expected type png, jpeg or pdf"
                )
            if not page.has_source:
                raise DescriptorValidationError(f"pages[{index}]: missing 'url' or 'content'")
