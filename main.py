#!/usr/bin/env python3
"""
CardCanvas - card template customization engine.

Validate, preview, animate and export customized e-card templates from
the command line, or open them in the Qt editor.
"""

import sys

from cardcanvas.cli import main


if __name__ == "__main__":
    sys.exit(main())
