"""PyQt6 adapters for desktop hosts."""

from .qt_adapter import QtScheduler, QtStyleRoot
