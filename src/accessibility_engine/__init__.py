"""
Accessibility Engine

Keeps a user's accessibility preferences (toggles, presets, font scale,
contrast and more) consistent between a local cache and a remote record, and
projects them onto the rendered view.
"""

__version__ = "1.0.0"
__author__ = "Accessibility Engine Team"
