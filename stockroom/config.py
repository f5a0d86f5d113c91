from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "STOCKROOM_DATA_DIR"
ENV_LOG_LEVEL = "STOCKROOM_LOG_LEVEL"
SESSION_DATA_DIR = "stockroom_data_dir"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    currency: str = "IDR"
    items_per_page: int = 10
    low_stock_threshold: int = 10
    log_level: str = "INFO"


def _default_data_dir() -> Path:
    return Path.home() / ".stockroom"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Also record it in the default folder so the next start picks it up
    default_dir = _default_data_dir()
    if default_dir.resolve() != data_dir:
        default_dir.mkdir(parents=True, exist_ok=True)
        (default_dir / CONFIG_FILE_NAME).write_text(json.dumps(payload, indent=2), encoding="utf-8")

    st.session_state[SESSION_DATA_DIR] = str(data_dir)


def resolve_settings(
    session: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    # Priority order:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    session = session if session is not None else {}
    env = env if env is not None else os.environ

    if session.get(SESSION_DATA_DIR):
        data_dir = Path(session[SESSION_DATA_DIR]).expanduser().resolve()
    elif env.get(ENV_DATA_DIR):
        data_dir = Path(env[ENV_DATA_DIR]).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = data_dir / "stockroom.db"
    log_level = str(env.get(ENV_LOG_LEVEL) or "INFO").strip().upper()
    return Settings(data_dir=data_dir, db_path=db_path, log_level=log_level)


@st.cache_resource
def get_settings() -> Settings:
    return resolve_settings(dict(st.session_state))
