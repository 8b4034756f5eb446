"""
Pytest configuration and fixtures for Accessibility Engine tests.
"""

import pytest
import tempfile
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from accessibility_engine.core.exceptions import RemoteLoadError, RemoteWriteError
from accessibility_engine.core.identity import SessionIdentityProvider
from accessibility_engine.core.ports import RemotePreferences
from accessibility_engine.core.view_projector import DocumentRoot
from accessibility_engine.engine import AccessibilityEngine


@pytest.fixture(scope="session")
def temp_app_dir():
    """Create a temporary application directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def mock_app_dirs(temp_app_dir, monkeypatch):
    """Mock application directories to use temp directory."""
    monkeypatch.setattr(
        "accessibility_engine.utils.constants.APP_DATA_DIR",
        temp_app_dir,
    )
    monkeypatch.setattr(
        "accessibility_engine.utils.constants.DATABASE_FILE",
        temp_app_dir / "test.sqlite",
    )
    monkeypatch.setattr(
        "accessibility_engine.utils.constants.LOG_FILE",
        temp_app_dir / "logs" / "test.log",
    )


class ManualHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler: time moves only on ``advance``.

    Submitted work is queued until ``run_tasks`` is called, which lets tests
    observe the state while a remote request is "in flight". Work handed back
    with ``call_soon`` waits in ``posted`` and also runs on ``run_tasks``.
    """

    def __init__(self):
        self.now = 0.0
        self._timers: List[Tuple[float, int, Callable[[], None], ManualHandle]] = []
        self._seq = 0
        self.tasks: List[Tuple[Callable[..., Any], Tuple[Any, ...]]] = []
        self.posted: List[Tuple[Callable[..., Any], Tuple[Any, ...]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle()
        self._seq += 1
        self._timers.append((self.now + delay, self._seq, callback, handle))
        return handle

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self.tasks.append((fn, args))

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        self.posted.append((fn, args))

    @property
    def pending_timers(self) -> int:
        return sum(1 for *_, handle in self._timers if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        """Move time forward, firing due timers in order."""
        self.now += seconds
        while True:
            due = sorted(
                (t for t in self._timers if t[0] <= self.now and not t[3].cancelled),
                key=lambda t: (t[0], t[1]),
            )
            if not due:
                break
            timer = due[0]
            self._timers.remove(timer)
            timer[2]()
        self._timers = [t for t in self._timers if not t[3].cancelled]

    def run_tasks(self) -> int:
        """Run queued background work (including work it queues)."""
        count = 0
        while self.tasks or self.posted:
            queue = self.tasks if self.tasks else self.posted
            fn, args = queue.pop(0)
            fn(*args)
            count += 1
        return count


class MemoryCache:
    """Dict-backed local cache."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value


class FakeRemote:
    """In-memory remote preference store that records calls."""

    def __init__(self):
        self.records: Dict[str, RemotePreferences] = {}
        self.fetches: List[str] = []
        self.saves: List[Tuple[str, RemotePreferences]] = []
        self.fail_fetch = False
        self.fail_save = False

    def fetch(self, identity: str) -> Optional[RemotePreferences]:
        self.fetches.append(identity)
        if self.fail_fetch:
            raise RemoteLoadError("remote unavailable", status_code=503)
        return self.records.get(identity)

    def save(self, identity: str, preferences: RemotePreferences) -> None:
        if self.fail_save:
            raise RemoteWriteError("remote unavailable", status_code=503)
        self.saves.append((identity, preferences))
        self.records[identity] = preferences


class RecordingHaptics:
    def __init__(self):
        self.pulses: List[Tuple[int, ...]] = []

    def pulse(self, pattern) -> None:
        self.pulses.append(tuple(pattern))


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def local_cache():
    return MemoryCache()


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def identity():
    return SessionIdentityProvider()


@pytest.fixture
def haptics():
    return RecordingHaptics()


@pytest.fixture
def root():
    return DocumentRoot(["dark"])


@pytest.fixture
def engine(local_cache, scheduler, remote, identity, root, haptics):
    """Unstarted engine wired to in-memory fakes."""
    return AccessibilityEngine(
        local_cache=local_cache,
        scheduler=scheduler,
        remote=remote,
        identity_provider=identity,
        root=root,
        haptics=haptics,
        debounce_seconds=1.0,
        preserved_selectors=["dark"],
    )


# Skip GUI tests if PyQt6 is not available or display is not available
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "gui: mark test as requiring GUI (skipped if no display)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip GUI tests if appropriate."""
    import os

    # Check if we have a display
    has_display = (
        os.environ.get("DISPLAY")
        or os.environ.get("QT_QPA_PLATFORM") == "offscreen"
        or sys.platform == "darwin"
    )

    # Try importing PyQt6
    try:
        import PyQt6
        has_pyqt = True
    except ImportError:
        has_pyqt = False

    skip_gui = pytest.mark.skip(reason="GUI tests require PyQt6 and display")

    for item in items:
        if "gui" in item.keywords:
            if not has_display or not has_pyqt:
                item.add_marker(skip_gui)
