"""
Configuration loader for MLW.

Settings live in an env-style file (mlw.env by convention):

    MLW_STATUS_POLICY=gtd
    MLW_UNIQUE_NAMES=false
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mlw.entities.status_fsm import POLICIES, POLICY_FREE
from . import envparse

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "mlw.env"

VALID_STATUS_POLICIES = POLICIES

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class MlwConfig:
    """Aggregate-wide settings."""
    status_policy: str = POLICY_FREE  # "free" or "gtd"
    unique_names: bool = False  # Reject duplicate names within a kind


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning(f"[CONFIG] Unknown {key} '{value}', defaulting to {str(default).lower()}")
    return default


def config_from_env(env: dict[str, str]) -> MlwConfig:
    """Build MlwConfig from parsed env values, falling back on bad values."""
    policy = env.get("MLW_STATUS_POLICY", POLICY_FREE).strip().lower()
    if policy not in VALID_STATUS_POLICIES:
        logger.warning(
            f"[CONFIG] Unknown MLW_STATUS_POLICY '{policy}', defaulting to '{POLICY_FREE}'. "
            f"Valid values: {', '.join(VALID_STATUS_POLICIES)}"
        )
        policy = POLICY_FREE

    unique_names = _parse_bool("MLW_UNIQUE_NAMES", env.get("MLW_UNIQUE_NAMES", "false"), False)
    return MlwConfig(status_policy=policy, unique_names=unique_names)


def load_config(path: Optional[Path] = None) -> MlwConfig:
    """Load config from path (default ./mlw.env). Missing file gives defaults."""
    path = path or Path(DEFAULT_CONFIG_FILE)
    if not path.exists():
        logger.debug(f"[CONFIG] {path} not found, using defaults")
        return MlwConfig()
    return config_from_env(envparse.load_env(path))
