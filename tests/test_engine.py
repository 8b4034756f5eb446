"""Tests for the engine facade and its wiring."""

from accessibility_engine.core.config_model import DEFAULT_CONFIG_RECORD
from accessibility_engine.core.identity import SessionIdentityProvider
from accessibility_engine.core.persistence import HydrationState
from accessibility_engine.core.ports import RemotePreferences
from accessibility_engine.core.view_projector import DocumentRoot
from accessibility_engine.engine import AccessibilityEngine, build_engine
from accessibility_engine.remote.client import RemotePreferenceClient
from accessibility_engine.database.local_cache import SQLiteLocalCache
from accessibility_engine.utils.constants import (
    AccessibilityProfile,
    ContrastTheme,
    FontFamily,
    Spacing,
)

from conftest import FakeRemote, ManualScheduler, MemoryCache


class FetchDuringRenderRoot(DocumentRoot):
    """Root that lets queued background work finish inside its first render."""

    def __init__(self, scheduler):
        super().__init__()
        self._scheduler = scheduler
        self._armed = True

    def set_variable(self, name, value):
        super().set_variable(name, value)
        if self._armed:
            self._armed = False
            self._scheduler.run_tasks()


class TestEngineFacade:
    """Tests for AccessibilityEngine."""

    def test_start_renders_current_state(self, engine, root):
        engine.start()
        assert root.selectors == {"dark"}
        assert root.variables["font-size"] == "100%"

    def test_dyslexia_scenario(self, engine, root):
        engine.start()
        config = engine.activate_profile("dislexia")

        assert config.spacing is Spacing.WIDE
        assert config.font_family is FontFamily.OPENDYSLEXIC
        assert config.line_focus is True
        assert config.contrast_theme is ContrastTheme.HIGH_CONTRAST_LIGHT
        assert config.active_profile is AccessibilityProfile.DISLEXIA

        assert {"dark", "acc-spacing-wide", "acc-lineFocus"} <= root.selectors

    def test_view_follows_every_change(self, engine, root):
        engine.start()
        engine.increase_font_size()
        assert root.variables["font-size"] == "110%"

        engine.set_number("brightness", 60)
        assert root.variables["--acc-brightness"] == "60%"

        engine.reset()
        assert root.selectors == {"dark"}
        assert root.variables["font-size"] == "100%"

    def test_projection_matches_root(self, engine, root):
        engine.start()
        engine.activate_profile("daltonismo")
        assert engine.projection.selectors | {"dark"} == root.selectors

    def test_subscribe(self, engine):
        engine.start()
        seen = []
        unsubscribe = engine.subscribe(seen.append)

        engine.toggle("captions")
        unsubscribe()
        engine.toggle("captions")

        assert len(seen) == 1
        assert seen[0].captions is True

    def test_shutdown_stops_rendering(self, engine, root):
        engine.start()
        engine.shutdown()
        engine.toggle("captions")
        assert "acc-captions" not in root.selectors

    def test_list_profiles(self, engine):
        assert len(engine.list_profiles()) == 11

    def test_font_size_clamps(self, engine):
        engine.start()
        assert engine.set_number("font_size", 1000).font_size == 200
        assert engine.set_number("font_size", -50).font_size == 70


class TestBuildEngine:
    """Tests for the build_engine factory."""

    def test_local_only(self):
        cache = MemoryCache()
        engine = build_engine(
            {"sync": {"enabled": False}},
            local_cache=cache,
            scheduler=ManualScheduler(),
        )
        engine.start()

        assert isinstance(engine, AccessibilityEngine)
        assert engine.hydration_state is HydrationState.READY
        assert engine.config == DEFAULT_CONFIG_RECORD
        assert engine.local_cache is cache

    def test_default_adapters(self, tmp_path):
        engine = build_engine(
            {
                "sync": {"base_url": "http://api.test", "debounce_seconds": 0.5},
                "cache": {"database_path": str(tmp_path / "cache.sqlite")},
            },
            scheduler=ManualScheduler(),
        )

        assert isinstance(engine.local_cache, SQLiteLocalCache)
        assert isinstance(engine.persistence._remote, RemotePreferenceClient)
        assert engine.persistence._debouncer.delay == 0.5
        engine.local_cache.close()

    def test_custom_cache_keys(self):
        cache = MemoryCache()
        engine = build_engine(
            {"sync": {"enabled": False}, "cache": {"config_key": "prefs"}},
            local_cache=cache,
            scheduler=ManualScheduler(),
        )
        engine.start()
        engine.toggle("captions")

        assert "prefs" in cache.data

    def test_fetch_finishing_during_start_reaches_the_view(self):
        scheduler = ManualScheduler()
        remote = FakeRemote()
        remote.records["user-1"] = RemotePreferences(config={"fontSize": 180, "lineFocus": True})
        root = FetchDuringRenderRoot(scheduler)
        engine = build_engine(
            {"sync": {"enabled": True}},
            root=root,
            scheduler=scheduler,
            identity_provider=SessionIdentityProvider("user-1"),
            local_cache=MemoryCache(),
            remote=remote,
        )

        engine.start()
        scheduler.run_tasks()

        assert engine.hydration_state is HydrationState.READY
        assert engine.config.font_size == 180
        assert root.variables["font-size"] == "180%"
        assert "acc-lineFocus" in root.selectors
