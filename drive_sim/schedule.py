"""Replay a piecewise speed schedule and integrate the energy it costs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from drive_sim.constants import TIME_EPS_S
from drive_sim.io import parse_speed_trace, resample_to_interval
from drive_sim.stepper import InitSimulation, SimulationError
from drive_sim.vehicle import Vehicle, init_simulation


class ScheduleError(SimulationError):
    pass


@dataclass
class Schedule:
    """
    Target speeds at checkpoints 0, interval, 2*interval, ...

    Between consecutive checkpoints a constant acceleration is commanded.
    """

    interval_s: float
    speeds_mps: list[float] = field(default_factory=list)

    def run(self, vehicle: Vehicle, **kwargs) -> ScheduleResult:
        return run_schedule(vehicle, self, **kwargs)

    @property
    def duration_s(self) -> float:
        return max(len(self.speeds_mps) - 1, 0) * self.interval_s


@dataclass(frozen=True)
class ScheduleResult:
    energy_j: float = 0.0
    distance_m: float = 0.0

    @property
    def energy_kwh(self) -> float:
        return self.energy_j / 3.6e6

    @property
    def specific_energy_wh_per_km(self) -> float:
        if self.distance_m <= 0.0:
            return float('nan')
        return (self.energy_j / 3600.0) / (self.distance_m / 1000.0)


def run_schedule(
    vehicle: Vehicle,
    schedule: Schedule,
    *,
    init_simulation: InitSimulation = init_simulation,
    echo: Callable[[str], None] | None = None,
) -> ScheduleResult:
    """
    Drive the schedule tick by tick.

    The commanded acceleration for each segment is computed from the speed the
    stepper actually reached at the previous checkpoint, so any shortfall is
    made up over the next segment. Energy is integrated with the
    stepper's own tick, which need not match the schedule interval.

    Raises ScheduleError on the first tick the vehicle cannot follow.
    """
    if schedule.interval_s <= 0.0:
        raise ValueError(f'Schedule interval must be positive (got {schedule.interval_s}).')

    sim = init_simulation(vehicle)

    energy_j = 0.0
    for i, target_speed in enumerate(schedule.speeds_mps):
        accel = (target_speed - sim.speed_mps) / schedule.interval_s
        target_time_s = i * schedule.interval_s
        while sim.time_s < target_time_s - TIME_EPS_S:
            result = sim.tick(accel)
            if result.limited:
                raise ScheduleError(
                    f'Vehicle failed to accelerate at {accel:5.2f} m/s^2 '
                    f'(only {result.accel_mps2:5.2f}) ({result.limit}) '
                    f'at t={sim.time_s:.3f} s'
                )
            energy_j += sim.power.total() * sim.interval_s

        if echo is not None and i > 0:
            echo(
                f'  checkpoint {i}: t={sim.time_s:.2f} s, target={target_speed:.2f} m/s, '
                f'speed={sim.speed_mps:.2f} m/s, energy={energy_j / 1000.0:.1f} kJ'
            )

    return ScheduleResult(energy_j=energy_j, distance_m=sim.distance_m)


def constant_speed_schedule(speed_mps: float, duration_s: float, interval_s: float = 1.0) -> Schedule:
    """Ramp from rest to `speed_mps` over one interval, then hold it for `duration_s`."""
    n_hold = int(round(duration_s / interval_s))
    return Schedule(interval_s=interval_s, speeds_mps=[0.0] + [float(speed_mps)] * (n_hold + 1))


def load_schedule_csv(path: Path, interval_s: float | None = None) -> Schedule:
    """Load a drive cycle CSV (time + speed columns) as a uniformly spaced schedule."""
    series = parse_speed_trace(path)
    series, used_interval_s = resample_to_interval(series, interval_s)
    return Schedule(interval_s=used_interval_s, speeds_mps=[max(0.0, float(v)) for v in series.values])
