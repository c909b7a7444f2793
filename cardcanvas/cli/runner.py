"""CLI runner for CardCanvas."""

import json
import logging
from concurrent.futures import wait
from pathlib import Path
from typing import Dict, List, Tuple

from cardcanvas.config import ConfigManager, EditorSettings
from cardcanvas.editor.assets import AssetLoader
from cardcanvas.editor.errors import CardCanvasError
from cardcanvas.editor.fonts import FontManager
from cardcanvas.editor.loader import TemplateValidator, load_template
from cardcanvas.editor.models import Template
from cardcanvas.editor.raster import PillowSurface
from cardcanvas.editor.scheduler import ManualFrameScheduler
from cardcanvas.editor.session import EditorSession
from cardcanvas.logging_config import ErrorLogger

logger = logging.getLogger(__name__)

MAX_ANIMATION_FRAMES = 10_000


def parse_size(value: str) -> Tuple[int, int]:
    """Parse WIDTHxHEIGHT."""
    try:
        w, h = value.lower().split("x", 1)
        return int(w), int(h)
    except ValueError:
        raise ValueError(f"Invalid size {value!r}, expected WIDTHxHEIGHT") from None


def parse_text_overrides(items: List[str]) -> Dict[str, str]:
    """Parse repeated ID=TEXT arguments."""
    overrides = {}
    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid --set-text {item!r}, expected ID=TEXT")
        field_id, text = item.split("=", 1)
        overrides[field_id.strip()] = text
    return overrides


def read_template_json(path: str) -> dict:
    return json.loads(Path(path).expanduser().read_text(encoding="utf-8"))


def handle_validate(data: dict) -> int:
    issues = TemplateValidator().validate(data)
    if not issues:
        print("Template is valid.")
        return 0
    print(f"Template has {len(issues)} problem(s):")
    for issue in issues:
        print(f"  - {issue}")
    return 1


def build_session(
    template: Template,
    settings: EditorSettings,
    config: ConfigManager,
    scheduler: ManualFrameScheduler,
) -> Tuple[EditorSession, FontManager]:
    """Create a headless session with template fonts loaded (or given up on)."""
    fonts = FontManager(
        custom_dirs=settings.font_dirs,
        cache_dir=config.get_font_cache_dir(),
        request_timeout=settings.request_timeout,
    )
    fonts_ready = fonts.load_custom_fonts(template.custom_fonts)
    done, _ = wait([fonts_ready], timeout=settings.font_load_timeout)
    if not done:
        logger.warning("Timed out waiting for template fonts; continuing with fallback fonts")

    errors: List[Exception] = []
    session = EditorSession(
        template,
        PillowSurface(fonts),
        scheduler,
        settings=settings,
        asset_loader=AssetLoader(settings),
        fonts_ready=fonts_ready if done else None,
        on_error=errors.append,
    )
    return session, fonts


def open_page(session: EditorSession, page_index: int, container: Tuple[int, int]) -> None:
    """Load a page and fit it to the container; raises on asset failure."""
    if not session.load_page(page_index):
        raise CardCanvasError(f"Could not load page {page_index + 1}; see log for details")
    session.rescale(*container)


def handle_animate(session: EditorSession, scheduler: ManualFrameScheduler, args) -> int:
    frames_dir = Path(args.frames_dir).expanduser()
    frames_dir.mkdir(parents=True, exist_ok=True)

    finished = session.animate_all(args.animate, duration=args.duration, stagger=args.stagger, easing=args.easing)
    count = 0
    while True:
        session.surface.render().save(frames_dir / f"frame_{count:04d}.png")
        count += 1
        if finished.done() or count >= MAX_ANIMATION_FRAMES:
            break
        scheduler.step()

    print(f"Wrote {count} frame(s) to {frames_dir}")
    return 0


def handle_gui(template: Template, settings: EditorSettings, config: ConfigManager, page_index: int) -> int:
    from PySide6.QtWidgets import QApplication
    from cardcanvas.gui.canvas_view import CardEditorWidget
    from cardcanvas.gui.qt_surface import QtFrameScheduler, QtSurface

    app = QApplication.instance() or QApplication([])
    fonts = FontManager(custom_dirs=settings.font_dirs, cache_dir=config.get_font_cache_dir())
    session = EditorSession(
        template,
        QtSurface(),
        QtFrameScheduler(),
        settings=settings,
        fonts_ready=fonts.load_custom_fonts(template.custom_fonts),
        on_error=lambda e: print(f"Error: {e}"),
    )
    widget = CardEditorWidget(session)
    widget.setWindowTitle(template.name or "CardCanvas")
    widget.resize(1000, 700)
    session.open(page_index)
    widget.show()
    try:
        return app.exec()
    finally:
        fonts.shutdown()


def run_cli(args) -> int:
    """
    Run CLI with parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    if not args.template:
        print("No template given. Use --template PATH.")
        return 2

    try:
        data = read_template_json(args.template)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read template: {e}")
        return 2

    if args.validate:
        return handle_validate(data)

    if not (args.preview or args.export_json or args.animate or args.gui):
        print("Nothing to do. Use --validate, --preview, --export-json, --animate or --gui.")
        return 2

    config = ConfigManager()
    settings = config.editor_settings()

    try:
        container = parse_size(args.container)
        overrides = parse_text_overrides(args.set_text)
        template = load_template(data)
    except (ValueError, CardCanvasError) as e:
        print(f"Error: {e}")
        return 2

    page_index = args.page - 1
    if not 0 <= page_index < len(template.pages):
        print(f"Page {args.page} does not exist (template has {len(template.pages)} page(s)).")
        return 2

    if args.gui:
        return handle_gui(template, settings, config, page_index)

    scheduler = ManualFrameScheduler(frame_interval=1000.0 / max(1, args.fps))
    session, fonts = build_session(template, settings, config, scheduler)
    error_logger = ErrorLogger("card rendering", logger, reraise=False)
    try:
        with error_logger:
            open_page(session, page_index, container)
            for field_id, text in overrides.items():
                if not session.update_text(field_id, text):
                    print(f"Warning: field {field_id!r} is locked or does not exist on page {args.page}")

            if args.preview:
                out = Path(args.preview).expanduser()
                out.parent.mkdir(parents=True, exist_ok=True)
                session.surface.render(args.multiplier or 1.0).save(out)
                print(f"Preview saved to {out} (scale {session.current_scale:.4f})")

            if args.export_json:
                out = Path(args.export_json).expanduser()
                out.parent.mkdir(parents=True, exist_ok=True)
                payload = session.customized_data(include_preview=not args.no_preview, multiplier=args.multiplier)
                out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
                print(f"Customized data saved to {out}")

            if args.animate:
                handle_animate(session, scheduler, args)
    finally:
        session.dispose()
        fonts.shutdown()

    if error_logger.error is not None:
        print(f"Error: {error_logger.error}")
        return 1
    return 0


def main(argv=None) -> int:
    """Console entry point."""
    from cardcanvas.cli.parser import build_arg_parser
    from cardcanvas.logging_config import setup_logging

    args = build_arg_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), log_to_file=not args.no_log_file)
    return run_cli(args)
