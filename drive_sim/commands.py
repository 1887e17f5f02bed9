"""Schedule, acceleration and efficiency commands (config-driven, write to output_dir)."""

from __future__ import annotations

from pathlib import Path

from drive_sim.acceleration import merge_short_limits, run_acceleration_profile
from drive_sim.constants import kph_to_mps, mps_to_kph
from drive_sim.efficiency import CAUSES, efficiency_at_speeds, total_specific_power
from drive_sim.output import (
    accel_summary,
    schedule_summary,
    write_accel_profile_csv,
    write_efficiency_csv,
    write_json,
    write_limits_csv,
)
from drive_sim.plotting import plot_accel_profile, plot_efficiency, plot_schedule
from drive_sim.schedule import load_schedule_csv, run_schedule
from drive_sim.settings import read_config, req_bool, req_float, req_float_list, req_int, req_str, resolve_path
from drive_sim.vehicle import Vehicle, load_vehicle, validate_vehicle


def _load(config_path: Path | None) -> tuple[dict, Vehicle, Path]:
    config = read_config(config_path)
    vehicle = load_vehicle(resolve_path(req_str(config, ['vehicle', 'path'])))
    out_dir = resolve_path(req_str(config, ['output_dir']))
    return config, vehicle, out_dir


def run_schedule_command(echo=print, config_path: Path | None = None) -> dict:
    """Drive the configured cycle and report energy and distance."""
    config, vehicle, out_dir = _load(config_path)

    cycle_path = resolve_path(req_str(config, ['schedule', 'cycle_csv']))
    interval_s = req_float(config, ['schedule', 'interval_s'])
    schedule = load_schedule_csv(cycle_path, interval_s=interval_s)

    echo(f"Vehicle: {vehicle.name} (tick {vehicle.tick_s * 1000.0:.2f} ms)")
    echo(f"Cycle: {cycle_path.name}, {len(schedule.speeds_mps)} checkpoints every {schedule.interval_s:.2f} s")

    result = run_schedule(vehicle, schedule)
    summary = schedule_summary(schedule, result)

    echo(f"  Distance: {result.distance_m / 1000.0:.3f} km")
    echo(f"  Energy: {result.energy_kwh:.3f} kWh ({result.specific_energy_wh_per_km:.1f} Wh/km)")

    run_dir = out_dir / "schedule"
    run_dir.mkdir(parents=True, exist_ok=True)
    write_json(run_dir / "summary.json", summary)
    plot_schedule(schedule, run_dir / "schedule.png", title=f"{cycle_path.stem} ({vehicle.name})")

    echo(f"\nResults written to {run_dir}/")
    return summary


def run_accel_command(echo=print, config_path: Path | None = None) -> dict:
    """Standing-start run: 0-100, quarter mile, top speed and the limiting-cause trace."""
    config, vehicle, out_dir = _load(config_path)

    sample_interval_s = req_float(config, ['acceleration', 'sample_interval_ms']) / 1000.0
    max_time_s = req_float(config, ['acceleration', 'max_time_s'])

    estimate_mps = validate_vehicle(vehicle)
    echo(f"Vehicle: {vehicle.name}")
    echo(f"Estimated drag-limited top speed: {mps_to_kph(estimate_mps):.1f} km/h")

    profile = run_acceleration_profile(
        vehicle,
        sample_interval_s=sample_interval_s,
        max_time_s=max_time_s,
        echo=echo,
    )

    if req_bool(config, ['acceleration', 'merge_short_limits']):
        min_ticks = req_int(config, ['acceleration', 'merge_min_ticks'])
        raw_count = len(profile.limits)
        profile.limits = merge_short_limits(profile.limits, vehicle.tick_s, min_ticks=min_ticks)
        echo(f"Merged limiting segments <= {min_ticks} ticks: {raw_count} -> {len(profile.limits)}")

    summary = accel_summary(profile)

    echo(f"  Top speed: {summary['top_speed_kph']:.1f} km/h after {profile.accel_top_s:.2f} s")
    if profile.reaches_100:
        echo(f"  0-100 km/h: {profile.accel_100_s:.2f} s")
    else:
        echo("  0-100 km/h: not reached")
    echo(f"  Quarter mile: {profile.quarter_mile_s:.2f} s")
    echo(f"  Peak accel: {profile.peak_accel_mps2:.2f} m/s^2")
    echo("  Time per limiting cause:")
    for cause, duration_s in profile.limit_totals().items():
        echo(f"    {cause.value:10s} {duration_s:8.2f} s")

    run_dir = out_dir / "acceleration"
    run_dir.mkdir(parents=True, exist_ok=True)
    write_json(run_dir / "summary.json", summary)
    write_accel_profile_csv(run_dir / "profile.csv", profile)
    write_limits_csv(run_dir / "limits.csv", profile)
    plot_accel_profile(profile, run_dir / "profile.png", title=vehicle.name)

    echo(f"\nResults written to {run_dir}/")
    return summary


def run_efficiency_command(echo=print, config_path: Path | None = None) -> dict:
    """Cruise loss breakdown at the configured speeds."""
    config, vehicle, out_dir = _load(config_path)

    speeds_mps = [kph_to_mps(v) for v in req_float_list(config, ['efficiency', 'speeds_kph'])]
    eff = efficiency_at_speeds(vehicle, speeds_mps)
    totals = total_specific_power(eff)

    echo(f"Vehicle: {vehicle.name}")
    header = "  speed_kph " + " ".join(f"{c[:12]:>12s}" for c in CAUSES) + "     Wh/km"
    echo(header)
    for i, v in enumerate(speeds_mps):
        cols = " ".join(f"{eff[c][i] / 3.6:12.1f}" for c in CAUSES)
        echo(f"  {mps_to_kph(v):9.1f} {cols} {totals[i] / 3.6:9.1f}")

    run_dir = out_dir / "efficiency"
    run_dir.mkdir(parents=True, exist_ok=True)
    write_efficiency_csv(run_dir / "efficiency.csv", speeds_mps, eff)
    plot_efficiency(speeds_mps, eff, run_dir / "efficiency.png", title=vehicle.name)

    echo(f"\nResults written to {run_dir}/")
    return {"speeds_kph": [mps_to_kph(v) for v in speeds_mps], **eff}
