"""Single source of truth for config + repo paths (no env overrides).

Policy:
- No fallback/default config values in code.
- If required config keys are missing, terminate with a clear error.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


REPO_ROOT = Path(__file__).parent.parent
CONFIG_PATH = REPO_ROOT / 'config.json'


def resolve_path(p: str) -> Path:
    path = Path(p)
    return path if path.is_absolute() else (REPO_ROOT / path)


def load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding='utf-8'))


def _require_path(cfg: dict, keys: list[str]) -> Any:
    cur: Any = cfg
    prefix: list[str] = []
    for k in keys:
        prefix.append(k)
        if not isinstance(cur, dict) or k not in cur:
            raise KeyError(f'Missing required config key: {".".join(prefix)}')
        cur = cur[k]
    return cur


def req_str(cfg: dict, keys: list[str]) -> str:
    v = _require_path(cfg, keys)
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f'Config key {".".join(keys)} must be a non-empty string.')
    return v


def req_float(cfg: dict, keys: list[str]) -> float:
    v = _require_path(cfg, keys)
    if isinstance(v, bool):
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.')
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.') from e


def req_int(cfg: dict, keys: list[str]) -> int:
    v = _require_path(cfg, keys)
    if isinstance(v, bool):
        raise ValueError(f'Config key {".".join(keys)} must be an int-like value.')
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise ValueError(f'Config key {".".join(keys)} must be an int-like value.') from e


def req_bool(cfg: dict, keys: list[str]) -> bool:
    v = _require_path(cfg, keys)
    if not isinstance(v, bool):
        raise ValueError(f'Config key {".".join(keys)} must be true or false.')
    return v


def req_float_list(cfg: dict, keys: list[str]) -> list[float]:
    v = _require_path(cfg, keys)
    if not isinstance(v, list) or not v:
        raise ValueError(f'Config key {".".join(keys)} must be a non-empty list of numbers.')
    try:
        return [float(x) for x in v]
    except (TypeError, ValueError) as e:
        raise ValueError(f'Config key {".".join(keys)} must be a non-empty list of numbers.') from e


def read_config(path: Path | None = None) -> dict:
    cfg = load_json(path or CONFIG_PATH)
    validate_config(cfg)
    return cfg


def validate_config(cfg: dict) -> None:
    # Existence/type checks (no defaults).
    req_str(cfg, ['vehicle', 'path'])

    req_str(cfg, ['schedule', 'cycle_csv'])
    req_float(cfg, ['schedule', 'interval_s'])

    req_float(cfg, ['acceleration', 'sample_interval_ms'])
    req_float(cfg, ['acceleration', 'max_time_s'])
    req_bool(cfg, ['acceleration', 'merge_short_limits'])
    req_int(cfg, ['acceleration', 'merge_min_ticks'])

    req_float_list(cfg, ['efficiency', 'speeds_kph'])

    req_str(cfg, ['output_dir'])
