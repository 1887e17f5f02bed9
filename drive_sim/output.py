"""Output utilities for simulation results."""

from __future__ import annotations

import csv
import json
import math
from pathlib import Path

from drive_sim.acceleration import AccelProfile
from drive_sim.constants import mps_to_kph
from drive_sim.efficiency import CAUSES, total_specific_power
from drive_sim.schedule import Schedule, ScheduleResult


def _json_float(x: float) -> float | None:
    return None if math.isnan(x) else float(x)


def write_json(path: Path, doc: dict) -> None:
    path.write_text(json.dumps(doc, indent=2) + '\n', encoding='utf-8')


def accel_summary(profile: AccelProfile) -> dict:
    return {
        'top_speed_kph': mps_to_kph(profile.top_speed_mps),
        'accel_0_100_s': _json_float(profile.accel_100_s),
        'accel_top_s': profile.accel_top_s,
        'quarter_mile_s': profile.quarter_mile_s,
        'peak_accel_mps2': profile.peak_accel_mps2,
        'elapsed_s': profile.elapsed_s,
        'limits': [
            {'cause': r.cause.value, 'ticks': r.ticks, 'duration_s': r.duration_s}
            for r in profile.limits
        ],
    }


def write_accel_profile_csv(path: Path, profile: AccelProfile) -> None:
    """Write the sampled speed trace: one row per sample interval."""
    with path.open('w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(['time_s', 'speed_mps', 'speed_kph'])
        for i, v in enumerate(profile.profile_mps):
            w.writerow([f'{(i + 1) * profile.sample_interval_s:.6f}', f'{v:.6f}', f'{mps_to_kph(v):.6f}'])


def write_limits_csv(path: Path, profile: AccelProfile) -> None:
    with path.open('w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(['start_s', 'end_s', 'duration_s', 'ticks', 'cause'])
        t = 0.0
        for r in profile.limits:
            w.writerow([f'{t:.6f}', f'{t + r.duration_s:.6f}', f'{r.duration_s:.6f}', r.ticks, r.cause.value])
            t += r.duration_s


def write_efficiency_csv(path: Path, speeds_mps: list[float], eff: dict[str, list[float]]) -> None:
    """Specific power per cause in J/m (= N) and Wh/km."""
    totals = total_specific_power(eff)
    headers = ['speed_kph']
    headers += [f'{c.lower().replace(" ", "_")}_j_per_m' for c in CAUSES]
    headers += ['total_j_per_m', 'total_wh_per_km']

    with path.open('w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(headers)
        for i, v in enumerate(speeds_mps):
            row = [f'{mps_to_kph(v):.3f}']
            row += [f'{eff[c][i]:.6f}' for c in CAUSES]
            # 1 J/m = 1000 J/km = 1000/3600 Wh/km
            row += [f'{totals[i]:.6f}', f'{totals[i] / 3.6:.6f}']
            w.writerow(row)


def schedule_summary(schedule: Schedule, result: ScheduleResult) -> dict:
    return {
        'interval_s': schedule.interval_s,
        'checkpoints': len(schedule.speeds_mps),
        'duration_s': schedule.duration_s,
        'distance_m': result.distance_m,
        'energy_j': result.energy_j,
        'energy_kwh': result.energy_kwh,
        'wh_per_km': _json_float(result.specific_energy_wh_per_km),
    }
