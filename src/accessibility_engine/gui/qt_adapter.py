"""
PyQt6 adapters: apply projected style state to a widget tree and run the
engine's timers on the Qt event loop.

Example:
    app = QApplication(sys.argv)
    window = QMainWindow()
    engine = build_engine(settings, root=QtStyleRoot(window), scheduler=QtScheduler())
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional, Set

from PyQt6.QtCore import QObject, Qt, QThreadPool, QTimer, pyqtSignal, pyqtSlot
from PyQt6.QtWidgets import QApplication, QWidget

from ..utils.logger import get_logger

logger = get_logger(__name__)

SELECTOR_PROPERTY = "accClasses"
FONT_SIZE_VARIABLE = "font-size"

_INJECTED_BLOCK = re.compile(r"\s*/\* acc-start \*/.*?/\* acc-end \*/", re.DOTALL)


class QtStyleRoot:
    """Style root backed by a top-level widget.

    Selectors are exposed as the ``accClasses`` dynamic property so style
    sheets can match them, e.g. ``QWidget[accClasses~="acc-contrast"]``.
    Optional ``rules`` map a selector to a style sheet snippet that is
    injected while the selector is active. The ``font-size`` variable
    scales the application font from its size at construction time.
    """

    def __init__(self, widget: QWidget, rules: Optional[Mapping[str, str]] = None):
        self._widget = widget
        self._rules = dict(rules or {})
        self._selectors: Set[str] = set()
        self._variables: Dict[str, str] = {}

        app = QApplication.instance()
        size = app.font().pointSizeF() if app else -1
        # Pixel-sized fonts report -1
        self._base_point_size = size if size > 0 else 12.0

    @property
    def base_point_size(self) -> float:
        return self._base_point_size

    @property
    def selectors(self) -> Set[str]:
        return set(self._selectors)

    @property
    def variables(self) -> Dict[str, str]:
        return dict(self._variables)

    def clear_selectors(self) -> None:
        self._selectors.clear()
        self._refresh()

    def add_selector(self, name: str) -> None:
        self._selectors.add(name)
        self._refresh()

    def set_variable(self, name: str, value: str) -> None:
        self._variables[name] = value
        if name == FONT_SIZE_VARIABLE:
            self._apply_font_scale(value)
        else:
            self._widget.setProperty(name.lstrip("-"), value)

    def _refresh(self) -> None:
        self._widget.setProperty(SELECTOR_PROPERTY, " ".join(sorted(self._selectors)))

        ss = _INJECTED_BLOCK.sub("", self._widget.styleSheet())
        snippets = [self._rules[s] for s in sorted(self._selectors) if s in self._rules]
        if snippets:
            ss += "\n/* acc-start */ " + "\n".join(snippets) + " /* acc-end */"
        self._widget.setStyleSheet(ss)

        # Dynamic property selectors only re-evaluate after a re-polish
        style = self._widget.style()
        style.unpolish(self._widget)
        style.polish(self._widget)

    def _apply_font_scale(self, value: str) -> None:
        app = QApplication.instance()
        if app is None:
            return
        try:
            percent = float(value.rstrip("%"))
        except ValueError:
            logger.warning(f"Ignoring malformed font scale: {value!r}")
            return

        font = app.font()
        font.setPointSizeF(self._base_point_size * percent / 100)
        app.setFont(font)
        logger.debug(f"Application font scaled to {percent:g}%")


class _QtTimerHandle:
    def __init__(self, timer: QTimer, forget: Callable[["_QtTimerHandle"], None]):
        self._timer = timer
        self._forget = forget

    def cancel(self) -> None:
        self._timer.stop()
        self._forget(self)


class _Dispatcher(QObject):
    """Runs posted callables on the thread that owns it."""

    posted = pyqtSignal(object)  # (fn, args)

    def __init__(self):
        super().__init__()
        self.posted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    @pyqtSlot(object)
    def _run(self, item) -> None:
        fn, args = item
        try:
            fn(*args)
        except Exception as e:
            logger.error(f"Posted callback failed: {e}", exc_info=True)


class QtScheduler:
    """Scheduler running timers on the Qt event loop.

    Timer callbacks and ``call_soon`` work run on the GUI thread; background
    work goes to the global ``QThreadPool``. Create it on the GUI thread.
    """

    def __init__(self, pool: Optional[QThreadPool] = None):
        self._pool = pool or QThreadPool.globalInstance()
        self._handles: Set[_QtTimerHandle] = set()
        self._dispatcher = _Dispatcher()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _QtTimerHandle:
        timer = QTimer()
        timer.setSingleShot(True)
        handle = _QtTimerHandle(timer, self._handles.discard)

        def _fire():
            self._handles.discard(handle)
            try:
                callback()
            except Exception as e:
                logger.error(f"Scheduled callback failed: {e}", exc_info=True)

        timer.timeout.connect(_fire)
        self._handles.add(handle)
        timer.start(int(delay * 1000))
        return handle

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        def _run():
            try:
                fn(*args)
            except Exception as e:
                logger.error(f"Background task failed: {type(e).__name__}: {e}")

        self._pool.start(_run)

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        """Queue ``fn(*args)`` onto the GUI thread; safe from worker threads."""
        self._dispatcher.posted.emit((fn, args))

    @property
    def pending_timers(self) -> int:
        return len(self._handles)

    def wait_for_done(self, msecs: int = -1) -> bool:
        """Block until all submitted background work has finished."""
        return self._pool.waitForDone(msecs)
