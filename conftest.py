"""Root conftest: loads .env.test before any notify_service module imports settings."""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

# Tests never reach Redis; keep fan-out in-process regardless of the env file
os.environ["FANOUT_BACKEND"] = "memory"
