"""
On-screen rendering of pipeline results.
"""

from .overlay import DisplayWindow, draw_result, ESC_KEY

__all__ = ["DisplayWindow", "draw_result", "ESC_KEY"]
