"""Application version and build metadata helpers."""

from __future__ import annotations

import os
import subprocess
from importlib import metadata
from pathlib import Path
from typing import Tuple

from .config import Config

REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def _installed_version() -> str:
    try:
        return metadata.version(Config.APP_NAME)
    except metadata.PackageNotFoundError:
        return Config.DEFAULT_CONFIG["version"]


def _git_commit_short() -> str:
    env_commit = os.environ.get("APP_COMMIT")
    if env_commit:
        return env_commit
    try:
        res = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True, text=True, cwd=REPO_ROOT, timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired):
        return "unknown"
    if res.returncode == 0 and res.stdout.strip():
        return res.stdout.strip()
    return "unknown"


def get_version() -> Tuple[str, str]:
    """Return (version, commit) strings.

    `APP_VERSION` overrides the installed distribution's version.
    Commit is `APP_COMMIT`, the short Git hash, or `unknown`.
    """
    version = os.environ.get("APP_VERSION") or _installed_version()
    return version, _git_commit_short()


def format_version_banner() -> str:
    v, c = get_version()
    return f"{Config.APP_NAME} v{v} (commit {c})"
