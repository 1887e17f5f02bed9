from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from drive_sim.constants import KPH_TO_MPS, MPH_TO_MPS


@dataclass
class TimeSeries:
    time_s: list[float]
    values: list[float]


def _detect_delimiter(header_line: str) -> str:
    semicolons = header_line.count(";")
    commas = header_line.count(",")
    return ";" if semicolons >= commas and semicolons > 0 else ","


def _parse_number(s: str) -> float:
    return float(s.strip().replace(",", "."))


def _find_col(headers: list[str], candidates: Iterable[str]) -> int:
    candidates = [c.lower() for c in candidates]
    for i, h in enumerate(headers):
        for c in candidates:
            if c in h:
                return i
    return -1


def _time_scale(header: str) -> float:
    return 0.001 if "ms" in header else 1.0


def _speed_scale(header: str) -> float:
    if "kph" in header or "km/h" in header or "kmh" in header:
        return KPH_TO_MPS
    if "mph" in header:
        return MPH_TO_MPS
    return 1.0


def parse_speed_trace(
    path: Path,
    time_candidates: Iterable[str] = ("time",),
    speed_candidates: Iterable[str] = ("speed", "velocity"),
) -> TimeSeries:
    """
    Read a drive cycle CSV into seconds and m/s.

    Units come from the header: a time column mentioning "ms" is milliseconds,
    a speed column mentioning kph/km/h/kmh or mph is converted, anything else
    is taken as m/s.
    """
    text = path.read_text(encoding="utf-8", errors="ignore")
    lines = [l.strip() for l in text.splitlines() if l.strip() and not l.strip().startswith("#")]
    if not lines:
        raise ValueError(f"Empty drive cycle file: {path.name}")

    header_line = lines[0]
    delimiter = _detect_delimiter(header_line)
    headers = [h.strip().lower() for h in header_line.split(delimiter)]

    col_time = _find_col(headers, time_candidates)
    col_speed = _find_col(headers, speed_candidates)
    if col_time == -1 or col_speed == -1 or col_time == col_speed:
        raise ValueError(f"Missing columns in {path.name}: time={col_time}, speed={col_speed}")

    t_scale = _time_scale(headers[col_time])
    v_scale = _speed_scale(headers[col_speed])

    raw_rows: list[tuple[float, float]] = []
    for line in lines[1:]:
        parts = line.split(delimiter)
        if len(parts) <= max(col_time, col_speed):
            continue
        try:
            t = _parse_number(parts[col_time])
            v = _parse_number(parts[col_speed])
        except ValueError:
            continue
        raw_rows.append((t * t_scale, v * v_scale))

    if not raw_rows:
        raise ValueError(f"No valid rows found in {path.name}")

    return TimeSeries(time_s=[t for t, _ in raw_rows], values=[v for _, v in raw_rows])


def resample_to_interval(series: TimeSeries, interval_s: float | None = None) -> tuple[TimeSeries, float]:
    """
    Resample onto a uniform grid starting at the first sample.

    With no interval given the median sample spacing is used. Returns the
    resampled series and the interval actually used.
    """
    t = np.asarray(series.time_s, dtype=float)
    x = np.asarray(series.values, dtype=float)

    order = np.argsort(t, kind="stable")
    t = t[order]
    x = x[order]

    if interval_s is None:
        dt = np.diff(t)
        dt = dt[dt > 0]
        if dt.size == 0:
            raise ValueError("Cannot infer a sample interval from fewer than two distinct times.")
        interval_s = float(np.median(dt))

    if interval_s <= 0.0:
        raise ValueError(f"Resample interval must be positive (got {interval_s}).")

    t0 = float(t[0])
    t1 = float(t[-1])
    n = int(np.floor((t1 - t0) / interval_s + 1e-9)) + 1
    t_uniform = t0 + np.arange(n) * interval_s
    x_uniform = np.interp(t_uniform, t, x)

    return TimeSeries(time_s=t_uniform.tolist(), values=x_uniform.tolist()), interval_s
