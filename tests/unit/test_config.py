from __future__ import annotations

import pytest
from pydantic import ValidationError

from notify_service.config import Settings


def test_defaults_load_from_environment():
    cfg = Settings()  # type: ignore[call-arg]

    assert cfg.SSE_HEARTBEAT_SECONDS > 0
    assert cfg.database_url.startswith("postgresql+asyncpg://")


@pytest.mark.parametrize("value", [0, -1])
def test_heartbeat_interval_must_be_positive(value):
    with pytest.raises(ValidationError):
        Settings(SSE_HEARTBEAT_SECONDS=value)  # type: ignore[call-arg]


def test_queue_size_must_allow_one_frame():
    with pytest.raises(ValidationError):
        Settings(SSE_QUEUE_MAXSIZE=0)  # type: ignore[call-arg]
