"""Environment and dependency preflight checks.

Set ZXPLORER_SKIP_PREFLIGHT=1 to bypass (useful for development).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PreflightResult:
    ok: bool
    message: str


def _has_display() -> bool:
    return bool(os.environ.get("WAYLAND_DISPLAY") or os.environ.get("DISPLAY"))


def _check_python_deps() -> Optional[str]:
    """Return an error message if required deps are missing."""
    try:
        import cairo  # type: ignore[import-not-found]  # noqa: F401
    except ImportError as exc:
        return (
            "Missing Python dependency 'pycairo'. "
            "Install it with pip (pycairo) and ensure cairo is available. "
            f"Underlying error: {exc}"
        )

    try:
        import gi  # type: ignore[import-not-found]

        gi.require_version("Gtk", "4.0")
        gi.require_version("Adw", "1")
        from gi.repository import Gtk, Adw  # type: ignore[import-not-found]  # noqa: F401
    except (ImportError, ValueError) as exc:
        return (
            "Missing GTK 4/libadwaita bindings. Install PyGObject together with "
            "the GTK 4 and libadwaita introspection data from your distribution. "
            f"Underlying error: {exc}"
        )

    try:
        import pyzx  # type: ignore[import-not-found]  # noqa: F401
    except ImportError as exc:
        return (
            "Missing Python dependency 'pyzx', needed for simplification. "
            f"Install it with pip (pyzx). Underlying error: {exc}"
        )

    return None


def run_preflight(
    *,
    check_display: bool = True,
    check_deps: bool = True,
) -> PreflightResult:
    """Run checks and return a structured result."""
    if os.environ.get("ZXPLORER_SKIP_PREFLIGHT") == "1":
        return PreflightResult(True, "Preflight skipped via ZXPLORER_SKIP_PREFLIGHT=1")

    if check_display and not _has_display():
        return PreflightResult(
            False,
            "No graphical session detected (neither WAYLAND_DISPLAY nor DISPLAY is set). "
            "Set ZXPLORER_SKIP_PREFLIGHT=1 to bypass.",
        )

    if check_deps:
        dep_error = _check_python_deps()
        if dep_error:
            return PreflightResult(False, dep_error)

    return PreflightResult(True, "Preflight OK")


def run_preflight_or_die(
    *,
    check_display: bool = True,
    check_deps: bool = True,
) -> None:
    result = run_preflight(check_display=check_display, check_deps=check_deps)
    if result.ok:
        return

    sys.stderr.write("\nZXplorer preflight check failed:\n")
    sys.stderr.write(result.message)
    sys.stderr.write("\n\n")
    sys.stderr.write(
        "Suggested setup:\n"
        "  install GTK 4, libadwaita and PyGObject from your distribution\n"
        "  pip install -e .\n\n"
    )
    raise SystemExit(1)
