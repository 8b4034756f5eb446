"""
Command line entry point for the Accessibility Engine.
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from .utils.constants import APP_NAME, APP_VERSION, DATABASE_FILE, build_settings
from .utils.logger import setup_logging, get_logger
from .core.config_model import config_to_dict, field_kind
from .core.exceptions import AccessibilityEngineError
from .core.identity import SessionIdentityProvider
from .core.scheduling import ThreadScheduler
from .core.view_projector import DocumentRoot
from .database.local_cache import SQLiteLocalCache
from .engine import AccessibilityEngine, build_engine
from .remote.client import RemotePreferenceClient

HYDRATION_TIMEOUT = 15.0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="accessibility-engine",
        description="Manage accessibility preferences and their synchronization",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--database",
        type=Path,
        default=DATABASE_FILE,
        help="Local cache database path",
    )

    parser.add_argument(
        "--identity",
        help="Signed-in identity (enables remote sync)",
    )

    parser.add_argument(
        "--remote-url",
        help="Remote preference API base URL",
    )

    parser.add_argument(
        "--api-key",
        default="",
        help="Bearer token for the remote preference API",
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Disable remote sync",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print the current configuration")
    subparsers.add_parser("profiles", help="List available profiles")
    subparsers.add_parser("project", help="Print the projected style state")
    subparsers.add_parser("reset", help="Restore the default configuration")

    toggle = subparsers.add_parser("toggle", help="Flip a boolean setting")
    toggle.add_argument("field")

    set_cmd = subparsers.add_parser("set", help="Set an enumerated or numeric setting")
    set_cmd.add_argument("field")
    set_cmd.add_argument("value")

    profile = subparsers.add_parser("profile", help="Activate (or deactivate) a profile")
    profile.add_argument("profile_id")

    font = subparsers.add_parser("font", help="Step the font scale")
    font.add_argument("direction", choices=["up", "down"])

    onboarding = subparsers.add_parser("onboarding", help="Show or set the onboarding flag")
    onboarding.add_argument("state", nargs="?", choices=["done", "pending"])

    return parser.parse_args(argv)


def build_settings_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate CLI flags into settings overrides."""
    sync: Dict[str, Any] = {"api_key": args.api_key}
    if args.remote_url:
        sync["base_url"] = args.remote_url
    if args.offline or not args.identity:
        sync["enabled"] = False

    return {
        "sync": sync,
        "cache": {"database_path": str(args.database)},
    }


def run_command(engine: AccessibilityEngine, args: argparse.Namespace) -> int:
    """
    Execute one CLI command against a started engine.

    Returns:
        Exit code
    """
    command = args.command

    if command == "profiles":
        for info in engine.list_profiles():
            print(f"{info.profile.value:<12} {info.label} - {info.description}")
        return 0

    if command == "toggle":
        engine.toggle(args.field)
    elif command == "set":
        kind = field_kind(args.field)
        if kind == "number":
            engine.set_number(args.field, float(args.value))
        elif kind == "choice":
            engine.set_enum(args.field, args.value)
        else:
            raise AccessibilityEngineError(f"Use 'toggle' or 'profile' for {args.field}")
    elif command == "profile":
        engine.activate_profile(args.profile_id)
    elif command == "reset":
        engine.reset()
    elif command == "font":
        if args.direction == "up":
            engine.increase_font_size()
        else:
            engine.decrease_font_size()
    elif command == "onboarding":
        if args.state:
            engine.set_onboarding_completed(args.state == "done")
        print("completed" if engine.onboarding_completed else "pending")
        return 0

    if command == "project":
        projection = engine.projection
        output = {
            "selectors": sorted(projection.selectors),
            "variables": dict(projection.variables),
        }
    else:
        output = config_to_dict(engine.config)

    print(json.dumps(output, indent=2, sort_keys=True))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main application entry point.

    Returns:
        Exit code
    """
    args = parse_args(argv)

    # Initialize logging
    level = logging.DEBUG if args.debug else logging.WARNING
    setup_logging(level=level)
    logger = get_logger(__name__)

    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    settings = build_settings(build_settings_from_args(args))
    sync = settings["sync"]

    scheduler = ThreadScheduler()
    local_cache = SQLiteLocalCache(args.database)
    identity = SessionIdentityProvider(args.identity or None)
    remote = None
    if sync["enabled"] and sync["base_url"]:
        remote = RemotePreferenceClient(
            sync["base_url"],
            api_key=sync["api_key"],
            timeout=sync["timeout"],
        )

    engine = build_engine(
        settings,
        root=DocumentRoot(),
        scheduler=scheduler,
        identity_provider=identity,
        local_cache=local_cache,
        remote=remote,
    )

    engine.start()
    try:
        if not engine.wait_until_hydrated(HYDRATION_TIMEOUT):
            logger.warning("Remote preferences did not load in time; using local state")
        return run_command(engine, args)
    except (AccessibilityEngineError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        engine.shutdown(flush_pending=True)
        scheduler.shutdown(wait=True)
        if remote is not None:
            remote.close()
        local_cache.close()


if __name__ == "__main__":
    sys.exit(main())
