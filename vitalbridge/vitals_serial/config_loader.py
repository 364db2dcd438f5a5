from __future__ import annotations

import os
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "port": "/dev/ttyUSB0",  # COMx on Windows; override via env or config
    "baudrate": 115200,
    "timeout": 0.1,  # read timeout seconds, lets the reader notice stop()
    "delimiter": "\r\n",
    "encoding": "utf-8",
    # accumulate: wait until every vital key was seen; line: each line is a record
    "strategy": "accumulate",
    "max_buffer_chars": 4096,  # 0 = unbounded
}


def load_config(base_dir: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Load config/config.yml, then env (VITALS_*), then overrides.

    Search order:
    - base_dir/config/config.yml if provided
    - vitalbridge/vitals_serial/config/config.yml
    """
    cfg: Dict[str, Any] = dict(DEFAULT_CONFIG)

    candidates = []
    if base_dir:
        candidates.append(os.path.join(base_dir, "config", "config.yml"))
    here = os.path.dirname(__file__)
    candidates.append(os.path.join(here, "config", "config.yml"))

    for path in candidates:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if isinstance(data, dict):
                cfg.update(data)
            break

    env_port = os.getenv("VITALS_PORT")
    if env_port:
        cfg["port"] = env_port
    env_baud = os.getenv("VITALS_BAUD")
    if env_baud and env_baud.isdigit():
        cfg["baudrate"] = int(env_baud)
    env_strategy = os.getenv("VITALS_STRATEGY")
    if env_strategy:
        cfg["strategy"] = env_strategy.strip().lower()

    if overrides:
        cfg.update({k: v for k, v in overrides.items() if v is not None})

    return cfg
