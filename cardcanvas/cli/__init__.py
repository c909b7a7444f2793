"""Command-line interface for CardCanvas."""

from .parser import build_arg_parser
from .runner import run_cli, main

__all__ = ["build_arg_parser", "run_cli", "main"]
