"""
Configuration for the Oso Cloud client.

Settings are read from the process environment, optionally seeded from a
``.env`` file. Values already present in the environment take precedence.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_URL = "https://cloud.osohq.com"
DEFAULT_MAX_RETRIES = 10
DEFAULT_TIMEOUT_SECONDS = 30.0

URL_ENV = "OSO_URL"
API_KEY_ENV = "OSO_AUTH"
MAX_RETRIES_ENV = "OSO_MAX_RETRIES"
TIMEOUT_SECONDS_ENV = "OSO_TIMEOUT_SECONDS"


@dataclass
class ClientSettings:
    url: str = DEFAULT_URL
    api_key: str | None = None
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _to_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _to_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(env_file: str | Path | None = None) -> ClientSettings:
    """Build ``ClientSettings`` from the environment.

    ``env_file`` defaults to the nearest ``.env`` found by python-dotenv.
    """
    load_dotenv(env_file, override=False)

    url = os.environ.get(URL_ENV, "").strip() or DEFAULT_URL
    api_key = os.environ.get(API_KEY_ENV, "").strip() or None
    return ClientSettings(
        url=url,
        api_key=api_key,
        max_retries=_to_int_env(MAX_RETRIES_ENV, DEFAULT_MAX_RETRIES),
        timeout_seconds=_to_float_env(TIMEOUT_SECONDS_ENV, DEFAULT_TIMEOUT_SECONDS),
    )
