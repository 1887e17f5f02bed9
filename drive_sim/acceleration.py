"""Standing-start acceleration profile.

Every tick requests far more acceleration than any vehicle can deliver and lets
the stepper clamp it; the clamp cause reported with each tick is collected into
a run-length encoded trace of what limited acceleration and for how long.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from drive_sim.constants import (
    KPH_100_MPS,
    MAX_ACCEL_REQUEST_MPS2,
    QUARTER_MILE_M,
    TOP_SPEED_ACCEL_THRESHOLD_MPS2,
)
from drive_sim.stepper import InitSimulation, LimitingCause, SimulationError
from drive_sim.vehicle import Vehicle, init_simulation


DEFAULT_SAMPLE_INTERVAL_S = 0.01
DEFAULT_MAX_TIME_S = 600.0
DEFAULT_MERGE_MIN_TICKS = 10


@dataclass
class LimitingReason:
    cause: LimitingCause
    ticks: int
    duration_s: float


@dataclass
class AccelProfile:
    top_speed_mps: float = 0.0
    accel_100_s: float = 0.0
    accel_top_s: float = 0.0
    quarter_mile_s: float = 0.0
    peak_accel_mps2: float = 0.0
    limits: list[LimitingReason] = field(default_factory=list)
    profile_mps: list[float] = field(default_factory=list)
    sample_interval_s: float = DEFAULT_SAMPLE_INTERVAL_S
    elapsed_s: float = 0.0

    @property
    def reaches_100(self) -> bool:
        return not math.isnan(self.accel_100_s)

    def limit_totals(self) -> dict[LimitingCause, float]:
        """Total time (s) spent under each cause, in order of first appearance."""
        totals: dict[LimitingCause, float] = {}
        for reason in self.limits:
            totals[reason.cause] = totals.get(reason.cause, 0.0) + reason.duration_s
        return totals


class ProfileTimeoutError(SimulationError):
    """The run did not reach top speed and the quarter mile within the time budget."""

    def __init__(self, message: str, partial: AccelProfile):
        super().__init__(message)
        self.partial = partial


def run_acceleration_profile(
    vehicle: Vehicle,
    *,
    sample_interval_s: float = DEFAULT_SAMPLE_INTERVAL_S,
    max_time_s: float = DEFAULT_MAX_TIME_S,
    init_simulation: InitSimulation = init_simulation,
    echo: Callable[[str], None] | None = None,
) -> AccelProfile:
    """
    Full-throttle run from rest until both top speed and the quarter mile are recorded.

    Top speed is latched on the first tick whose achieved acceleration drops
    below TOP_SPEED_ACCEL_THRESHOLD_MPS2. If that speed is under 100 km/h the
    0-100 time is NaN regardless of anything recorded before.

    Raises ProfileTimeoutError (with the partial profile) once `max_time_s`
    of simulated time passes without both being recorded.
    """
    if sample_interval_s <= 0.0:
        raise ValueError(f'Sample interval must be positive (got {sample_interval_s}).')
    if max_time_s <= 0.0:
        raise ValueError(f'Time budget must be positive (got {max_time_s}).')

    sim = init_simulation(vehicle)
    result = AccelProfile(sample_interval_s=sample_interval_s)

    since_sample_s = 0.0
    while result.top_speed_mps == 0.0 or result.quarter_mile_s == 0.0:
        if sim.time_s >= max_time_s:
            result.elapsed_s = sim.time_s
            raise ProfileTimeoutError(
                f'Acceleration run did not finish within {max_time_s:.1f} s '
                f'(top speed {"recorded" if result.top_speed_mps else "not reached"}, '
                f'quarter mile {"recorded" if result.quarter_mile_s else "not reached"}, '
                f'distance {sim.distance_m:.1f} m)',
                result,
            )

        tick = sim.tick(MAX_ACCEL_REQUEST_MPS2)
        if tick.limit is None:
            raise SimulationError(
                f'Stepper reported an unconstrained {MAX_ACCEL_REQUEST_MPS2:.0f} m/s^2 '
                f'at t={sim.time_s:.3f} s; expected a limiting cause.'
            )

        if result.limits and result.limits[-1].cause is tick.limit:
            last = result.limits[-1]
            last.ticks += 1
            last.duration_s = last.ticks * sim.interval_s
        else:
            result.limits.append(LimitingReason(cause=tick.limit, ticks=1, duration_s=sim.interval_s))
            if echo is not None:
                echo(f'  t={sim.time_s:7.3f} s  v={sim.speed_mps * 3.6:6.1f} km/h  limit -> {tick.limit}')

        if tick.accel_mps2 > result.peak_accel_mps2:
            result.peak_accel_mps2 = tick.accel_mps2

        if sim.speed_mps > KPH_100_MPS and result.accel_100_s == 0.0:
            result.accel_100_s = sim.time_s

        if sim.distance_m > QUARTER_MILE_M and result.quarter_mile_s == 0.0:
            result.quarter_mile_s = sim.time_s

        if tick.accel_mps2 < TOP_SPEED_ACCEL_THRESHOLD_MPS2 and result.top_speed_mps == 0.0:
            result.top_speed_mps = sim.speed_mps
            result.accel_top_s = sim.time_s
            if sim.speed_mps < KPH_100_MPS:
                result.accel_100_s = math.nan

        since_sample_s += sim.interval_s
        if since_sample_s > sample_interval_s:
            result.profile_mps.append(sim.speed_mps)
            since_sample_s -= sample_interval_s

    result.elapsed_s = sim.time_s
    return result


def merge_short_limits(
    limits: list[LimitingReason],
    interval_s: float,
    min_ticks: int = DEFAULT_MERGE_MIN_TICKS,
) -> list[LimitingReason]:
    """
    Fold flicker out of a limiting-cause trace.

    Segments of at most `min_ticks` ticks are dropped and their time is carried
    into the next kept segment. A kept segment with the same cause as the one
    before it is merged into it. Time still carried at the end goes to the last
    kept segment, so durations keep summing to the run time. If every segment is
    short the trace is returned unchanged.
    """
    kept: list[LimitingReason] = []
    carry = 0
    for reason in limits:
        if reason.ticks <= min_ticks:
            carry += reason.ticks
        elif kept and kept[-1].cause is reason.cause:
            kept[-1].ticks += reason.ticks + carry
            carry = 0
        else:
            kept.append(LimitingReason(cause=reason.cause, ticks=reason.ticks + carry, duration_s=0.0))
            carry = 0

    if not kept:
        return [LimitingReason(r.cause, r.ticks, r.duration_s) for r in limits]

    kept[-1].ticks += carry
    for reason in kept:
        reason.duration_s = reason.ticks * interval_s
    return kept
