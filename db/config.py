"""
db/config.py

Environment-driven database configuration for PharmPlus services.
"""

from __future__ import annotations

import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES: tuple[str, ...] = (".env", ".env.local")
_CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})


def load_env_files(root: Path | None = None) -> None:
    """
    Load KEY=VALUE pairs from `.env` then `.env.local` under *root*.

    Variables already present in the process environment win.
    """

    base = root or _PROJECT_ROOT
    for filename in _ENV_FILES:
        env_path = base / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key:
                os.environ.setdefault(key, value.strip().strip('"').strip("'"))


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite postgres URLs to use the psycopg (v3) SQLAlchemy driver.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Pick the database URL for the current environment.

    Order: DATABASE_URL, then CLOUD_DATABASE_URL when ENVIRONMENT is
    cloud-like, then LOCAL_DATABASE_URL.
    """

    load_env_files()

    candidates = [os.getenv("DATABASE_URL")]
    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    if environment in _CLOUD_ENVIRONMENTS:
        candidates.append(os.getenv("CLOUD_DATABASE_URL"))
    candidates.append(os.getenv("LOCAL_DATABASE_URL"))

    for candidate in candidates:
        if candidate and candidate.strip():
            return normalize_postgres_url(candidate.strip())

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, or configure "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )
