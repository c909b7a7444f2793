"""
Editing session for one template.

Owns the drawing surface, the text-field registry, the projector and the
animator for the page being edited. Everything runs cooperatively on the
injected frame scheduler; nothing blocks the calling thread.
"""

import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from PIL import Image

from .animation import AnimationKind, Animator, Easing
from .assets import AssetLoader
from .errors import AssetLoadError, ConfigurationError, DuplicateFieldError, SessionDisposedError
from .models import DesignSize, Template, TemplatePage
from .projector import CoordinateProjector
from .registry import TextFieldRegistry
from .scaling import capture_original_geometry, compute_scale, resolve_design_size, validate_design_size
from .scheduler import FrameScheduler
from .surface import DrawingSurface
from ..config import EditorSettings

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Exception], None]
PageTextCallback = Callable[[int, str, str], None]


class EditorSession:
    """
    Customization session for a template.

    Args:
        template: Loaded template
        surface: Rendering backend owned exclusively by this session
        scheduler: Frame scheduler for animation and resize coalescing
        settings: Editor settings (padding, durations, ...)
        asset_loader: Background loader
        fonts_ready: Future that completes once template fonts are available
        on_error: Called with asset-load failures
        on_text_change: Called as ``(page_index, field_id, text)`` after each edit
    """

    def __init__(
        self,
        template: Template,
        surface: DrawingSurface,
        scheduler: FrameScheduler,
        settings: Optional[EditorSettings] = None,
        asset_loader: Optional[AssetLoader] = None,
        fonts_ready: Optional[Future] = None,
        on_error: Optional[ErrorCallback] = None,
        on_text_change: Optional[PageTextCallback] = None,
    ):
        if not template.pages:
            raise ConfigurationError("Template has no pages")

        self.template = template
        self.surface = surface
        self.scheduler = scheduler
        self.settings = settings or EditorSettings()
        self.asset_loader = asset_loader or AssetLoader(self.settings)
        self.fonts_ready = fonts_ready
        self.on_error = on_error
        self.on_text_change = on_text_change

        self.registry = TextFieldRegistry()
        self.registry.subscribe(self._record_text)
        self.animator = Animator(
            surface,
            scheduler,
            default_duration=self.settings.animation_duration_ms,
            stagger_delay=self.settings.stagger_delay_ms,
            slide_offset=self.settings.slide_offset_px,
        )
        self.projector: Optional[CoordinateProjector] = None
        self.design_size: Optional[DesignSize] = None

        self._page_index: Optional[int] = None
        self._page_texts: Dict[int, Dict[str, str]] = {}
        self._container: Tuple[float, float] = (0.0, 0.0)
        self._resize_handle: Any = None
        self._pending_resize: Optional[Tuple[float, float]] = None
        self._open_handle: Any = None
        self._disposed = False

    # Lifecycle

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def page_count(self) -> int:
        return len(self.template.pages)

    @property
    def current_page_index(self) -> Optional[int]:
        return self._page_index

    @property
    def current_page(self) -> Optional[TemplatePage]:
        if self._page_index is None:
            return None
        return self.template.pages[self._page_index]

    def _check_alive(self) -> None:
        if self._disposed:
            raise SessionDisposedError("Editor session has been disposed")

    def open(self, page_index: int = 0) -> Future:
        """
        Load a page once the fonts-ready future has completed.

        The future is polled once per frame. Font failures are logged and
        the page loads with fallback fonts.

        Returns:
            Future resolving to ``load_page``'s result
        """
        self._check_alive()
        opened: Future = Future()

        def attempt(_timestamp: Optional[float] = None) -> None:
            self._open_handle = None
            if self._disposed:
                return
            fonts = self.fonts_ready
            if fonts is not None and not fonts.done():
                self._open_handle = self.scheduler.request_frame(attempt)
                return
            if fonts is not None:
                if fonts.cancelled():
                    logger.warning("Font loading was cancelled; using fallback fonts")
                elif fonts.exception() is not None:
                    logger.warning(f"Font loading failed, using fallback fonts: {fonts.exception()}")
            try:
                opened.set_result(self.load_page(page_index))
            except Exception as e:
                opened.set_exception(e)

        attempt()
        return opened

    def dispose(self) -> None:
        """Tear down the session. Pending frames are cancelled; in-flight animations never resolve."""
        if self._disposed:
            return
        self._disposed = True
        self.scheduler.cancel(self._resize_handle)
        self.scheduler.cancel(self._open_handle)
        self._resize_handle = self._open_handle = None
        self.animator.cancel_all()
        self.registry.clear()
        self.surface.dispose()
        self.projector = None
        logger.info(f"Editor session for template {self.template.id} disposed")

    # Page loading

    def _load_background(self, page: TemplatePage) -> Optional[Image.Image]:
        if not page.image_url and not page.background_id:
            logger.info("Page has no background; using a blank canvas")
            return None
        url = self.asset_loader.resolve_background_url(page.image_url, page.background_id)
        return self.asset_loader.load_image(url)

    def _report_error(self, error: Exception) -> None:
        logger.error(f"Asset load failed: {error}")
        if self.on_error is not None:
            self.on_error(error)

    def load_page(self, page_index: int) -> bool:
        """
        Replace the live page with ``page_index``.

        On an asset failure the error callback fires and the previously
        loaded page stays as it was.

        Returns:
            True if the page was loaded

        Raises:
            DuplicateFieldError: if the page repeats a field id; the
                current page is left untouched
        """
        self._check_alive()
        if not 0 <= page_index < self.page_count:
            raise ConfigurationError(f"Page index {page_index} out of range (0-{self.page_count - 1})")
        page = self.template.pages[page_index]

        try:
            background = self._load_background(page)
        except AssetLoadError as e:
            self._report_error(e)
            return False

        authored = None
        if page.canvas_width is not None and page.canvas_height is not None:
            authored = validate_design_size(page.canvas_width, page.canvas_height)
        design = resolve_design_size(
            page.canvas_width,
            page.canvas_height,
            background.size if background is not None else None,
        )

        # Reject duplicate ids while the current page is still intact
        seen = set()
        for field in page.text_elements:
            if field.id in seen:
                raise DuplicateFieldError(field.id)
            seen.add(field.id)

        self.animator.cancel_all()
        self.registry.clear()
        self.surface.remove_all()

        texts = self._page_texts.setdefault(page_index, {})
        for field in page.text_elements:
            original = capture_original_geometry(field, authored, design)
            obj = self.surface.create_text(field)
            if field.id in texts:
                obj.set_text(texts[field.id])
            self.registry.register(field.id, obj, original)
            self.surface.add(obj)

        self._page_index = page_index
        self.design_size = design
        self.projector = CoordinateProjector(self.surface, self.registry, design, background)
        scale = self.rescale(*self._container)
        logger.info(
            f"Loaded page {page_index + 1}/{self.page_count}: design {design.width:g}x{design.height:g}, "
            f"{len(self.registry)} field(s), scale {scale:.4f}"
        )
        return True

    def go_to_page(self, page_index: int) -> bool:
        """Switch pages. Out-of-range indices and the current page are ignored."""
        self._check_alive()
        if page_index == self._page_index or not 0 <= page_index < self.page_count:
            return False
        return self.load_page(page_index)

    # Scaling

    def compute_scale(self, container_width: float = 0, container_height: float = 0) -> float:
        """Scale for a container; zero-sized containers fall back to the design size."""
        if self.design_size is None:
            raise ConfigurationError("No page loaded")
        return compute_scale(
            self.design_size.width,
            self.design_size.height,
            container_width or self.design_size.width,
            container_height or self.design_size.height,
            padding=self.settings.padding,
            min_floor=self.settings.min_floor,
        )

    def rescale(self, container_width: float = 0, container_height: float = 0) -> float:
        """Compute and apply the scale for a container size immediately."""
        self._check_alive()
        self._container = (container_width, container_height)
        scale = self.compute_scale(container_width, container_height)
        self.projector.apply_scale(scale)
        return scale

    def notify_resize(self, container_width: float, container_height: float) -> None:
        """
        Record a container resize; at most one rescale runs per frame and
        only the latest size is applied.
        """
        self._check_alive()
        self._pending_resize = (container_width, container_height)
        self.scheduler.cancel(self._resize_handle)
        self._resize_handle = self.scheduler.request_frame(self._flush_resize)

    def _flush_resize(self, _timestamp: Optional[float] = None) -> None:
        self._resize_handle = None
        size, self._pending_resize = self._pending_resize, None
        if self._disposed or size is None:
            return
        if self.projector is None:
            self._container = size
            return
        self.rescale(*size)

    @property
    def current_scale(self) -> Optional[float]:
        return self.projector.current_scale if self.projector else None

    # Text

    def _record_text(self, field_id: str, text: str) -> None:
        self._page_texts.setdefault(self._page_index, {})[field_id] = text
        self.surface.request_render()
        if self.on_text_change is not None:
            self.on_text_change(self._page_index, field_id, text)

    def update_text(self, field_id: str, text: str) -> bool:
        """Edit a field on the current page; locked and unknown fields are left alone."""
        self._check_alive()
        return self.registry.update_text(field_id, text)

    def page_texts(self, page_index: int) -> List[Dict[str, str]]:
        """Final text per field for a page: user edits over the template text."""
        edits = self._page_texts.get(page_index, {})
        return [
            {"id": f.id, "text": edits.get(f.id, f.text)}
            for f in self.template.pages[page_index].text_elements
        ]

    # Animation

    def animate_field(
        self,
        field_id: str,
        kind: Union[str, AnimationKind],
        duration: Optional[float] = None,
        delay: float = 0,
        easing: Union[str, Easing, None] = None,
    ) -> Future:
        """Animate one field; a missing field yields an already-resolved future."""
        self._check_alive()
        kind = AnimationKind.parse(kind)
        obj = self.registry.get(field_id)
        if obj is None:
            logger.warning(f"animate_field: no live object for field {field_id}")
            skipped: Future = Future()
            skipped.set_result(None)
            return skipped
        return self.animator.animate(obj, kind, duration=duration, delay=delay, easing=easing)

    def animate_all(
        self,
        kind: Union[str, AnimationKind],
        duration: Optional[float] = None,
        stagger: Optional[float] = None,
        easing: Union[str, Easing, None] = None,
    ) -> Future:
        """Animate every field on the page with a stagger between starts."""
        self._check_alive()
        return self.animator.animate_multiple(
            self.registry.objects(), kind, duration=duration, stagger=stagger, easing=easing
        )

    # Publishing

    def customized_data(self, include_preview: bool = True, multiplier: Optional[float] = None) -> Dict[str, Any]:
        """
        Build the customized-data payload handed to the persistence layer.

        The preview is the current page rendered at ``multiplier`` as a PNG
        data URL.
        """
        self._check_alive()
        preview = None
        if include_preview and self.projector is not None:
            preview = self.surface.to_data_url(multiplier or self.settings.export_multiplier)
        return {
            "template_id": self.template.id,
            "pages": [
                {"page_index": i, "texts": self.page_texts(i)}
                for i in range(self.page_count)
            ],
            "preview": preview,
        }
