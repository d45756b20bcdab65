"""Shared test set-up.

Qt widgets are created on the offscreen platform so the suite runs
without a display.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
