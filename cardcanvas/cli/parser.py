"""Argument parser for CardCanvas CLI."""

import argparse

from cardcanvas.constants import VERSION
from cardcanvas.editor.animation import AnimationKind, EASINGS


def build_arg_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="cardcanvas",
        description="Validate, preview, animate and export customized card templates"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}"
    )

    parser.add_argument(
        "-T", "--template",
        help="Path to a template JSON file"
    )

    # Actions
    action_group = parser.add_argument_group("actions")
    action_group.add_argument(
        "--validate",
        action="store_true",
        help="Validate the template and report every problem"
    )
    action_group.add_argument(
        "--preview",
        metavar="OUT_PNG",
        help="Render the selected page, fitted to --container, to a PNG file"
    )
    action_group.add_argument(
        "--export-json",
        metavar="OUT_JSON",
        help="Write the customized-data payload (texts per page and preview) to a JSON file"
    )
    action_group.add_argument(
        "--animate",
        metavar="KIND",
        choices=[k.value for k in AnimationKind],
        help="Render an animation of every text field as PNG frames into --frames-dir"
    )
    action_group.add_argument(
        "--gui",
        action="store_true",
        help="Open the template in the graphical editor"
    )

    # Layout options
    layout_group = parser.add_argument_group("layout options")
    layout_group.add_argument(
        "--container",
        default="0x0",
        help="Container size WIDTHxHEIGHT in pixels (default: design size)"
    )
    layout_group.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number to work on, starting at 1 (default: 1)"
    )
    layout_group.add_argument(
        "--set-text",
        action="append",
        default=[],
        metavar="ID=TEXT",
        help="Replace the text of a field (repeatable)"
    )
    layout_group.add_argument(
        "--multiplier",
        type=float,
        help="Resolution multiplier for exported previews"
    )
    layout_group.add_argument(
        "--no-preview",
        action="store_true",
        help="Omit the rendered preview from --export-json"
    )

    # Animation options
    anim_group = parser.add_argument_group("animation options")
    anim_group.add_argument(
        "--frames-dir",
        default="frames",
        help="Output directory for --animate frames (default: frames)"
    )
    anim_group.add_argument(
        "--duration",
        type=float,
        help="Animation duration in milliseconds"
    )
    anim_group.add_argument(
        "--stagger",
        type=float,
        help="Delay in milliseconds between each field's start"
    )
    anim_group.add_argument(
        "--easing",
        choices=sorted(EASINGS),
        help="Easing function (default: easeOutCubic)"
    )
    anim_group.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Frames per second for --animate (default: 30)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Do not write a log file"
    )

    return parser
