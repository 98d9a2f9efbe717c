"""
Environment-driven configuration for pool engines.

Variables:
- PAIRSWAP_VERIFY_INVARIANTS   (bool, default on)
- PAIRSWAP_EVENT_LOG_CAPACITY  (int, clamped to [0, 1_000_000], default 1024)
- PAIRSWAP_LOG_LEVEL           (logging level name, default WARNING)

Malformed values fall back to the default instead of failing startup.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from ..core.pool import PoolEngineConfig

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(env: Mapping[str, str], name: str, *, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return bool(default)
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    logger.warning("ignoring unrecognised boolean %s=%r", name, raw)
    return bool(default)


def _env_int(env: Mapping[str, str], name: str, default: int, *, lo: int, hi: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", name, raw)
        return int(default)
    return max(lo, min(hi, v))


def load_config_from_env(env: Optional[Mapping[str, str]] = None) -> PoolEngineConfig:
    env = os.environ if env is None else env
    return PoolEngineConfig(
        verify_invariants=_env_bool(env, "PAIRSWAP_VERIFY_INVARIANTS", default=True),
        event_log_capacity=_env_int(env, "PAIRSWAP_EVENT_LOG_CAPACITY", 1024, lo=0, hi=1_000_000),
    )


def configure_logging(level: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> int:
    """
    Set the `pairswap` logger level and attach a stderr handler once.

    Returns the numeric level applied.
    """
    env = os.environ if env is None else env
    name = (level or env.get("PAIRSWAP_LOG_LEVEL") or "WARNING").strip().upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    root = logging.getLogger("pairswap")
    root.setLevel(numeric)
    if not any(getattr(h, "_pairswap_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._pairswap_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return numeric
