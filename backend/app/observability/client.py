"""Opik client used to trace provider attempts and rule-engine runs."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from opik import Opik

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_client: Optional[Opik] = None
_client_lock = Lock()
_init_attempted = False


def init_opik(config: Settings | None = None) -> Optional[Opik]:
    """Build the process-wide Opik client on first use.

    Tracing is on only when ``OPIK_ENABLED`` is set and ``OPIK_API_KEY`` is present.
    A failed or skipped initialisation is remembered until :func:`reset_opik_client`,
    so the AI call path never retries it.
    """
    global _client, _init_attempted

    with _client_lock:
        if _client is not None or _init_attempted:
            return _client
        _init_attempted = True

    config = config or get_settings()
    if not config.opik_enabled:
        logger.debug("Opik disabled; provider attempts will not be traced.")
        return None

    if not config.opik_api_key:
        logger.warning("OPIK_ENABLED is true but OPIK_API_KEY is missing; AI calls will not be traced.")
        return None

    try:
        client = Opik(project_name=config.opik_project, api_key=config.opik_api_key)
    except Exception as exc:  # pragma: no cover - defensive
        logger.warning("Failed to initialize Opik, tracing will be disabled: %s", exc)
        return None

    logger.info("Opik enabled (project=%s).", config.opik_project)
    _client = client
    return _client


def get_opik_client() -> Optional[Opik]:
    if _client is not None:
        return _client
    return init_opik()


def reset_opik_client() -> None:
    """Forget the cached client so the next call re-reads settings."""
    global _client, _init_attempted
    with _client_lock:
        _client = None
        _init_attempted = False
