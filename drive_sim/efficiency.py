"""Cruise power-loss decomposition at steady speeds."""

from __future__ import annotations

import math

from drive_sim.constants import STEADY_STATE_TOLERANCE_MPS2
from drive_sim.stepper import InitSimulation, SimulationError
from drive_sim.vehicle import Vehicle, init_simulation


AERODYNAMICS = 'Aerodynamics'
ROLLING_RESISTANCE = 'Rolling Resistance'
ACCESSORY = 'Accessory'
LOSSES = 'Losses'

CAUSES = [AERODYNAMICS, ROLLING_RESISTANCE, ACCESSORY, LOSSES]


class SteadyStateError(SimulationError):
    pass


def efficiency_at_speeds(
    vehicle: Vehicle,
    speeds_mps: list[float],
    *,
    init_simulation: InitSimulation = init_simulation,
) -> dict[str, list[float]]:
    """
    Specific power (W per m/s, i.e. J/m) needed to hold each speed, split by cause.

    The stepper speed is set directly (no ramp-up) and one tick with zero
    requested acceleration is taken. "Losses" is whatever the total draw
    holds beyond aerodynamics, rolling resistance and accessories, so the four
    entries always add up to total power / speed.

    Speeds must be positive and finite; zero would divide by zero.
    """
    for v in speeds_mps:
        if not (math.isfinite(v) and v > 0.0):
            raise ValueError(f'Cruise speeds must be positive and finite (got {v!r}).')

    sim = init_simulation(vehicle)

    eff: dict[str, list[float]] = {cause: [0.0] * len(speeds_mps) for cause in CAUSES}
    for i, speed in enumerate(speeds_mps):
        sim.speed_mps = speed
        tick = sim.tick(0.0)
        if abs(tick.accel_mps2) > STEADY_STATE_TOLERANCE_MPS2:
            raise SteadyStateError(
                f'Vehicle can not maintain speed {speed:5.2f} m/s '
                f'(net {tick.accel_mps2:+.3f} m/s^2, {tick.limit})'
            )

        power = sim.power
        total = power.total() / speed
        aero = power.aerodynamics / speed
        rolling = power.rolling_resistance / speed
        accessory = power.accessory / speed

        eff[AERODYNAMICS][i] = aero
        eff[ROLLING_RESISTANCE][i] = rolling
        eff[ACCESSORY][i] = accessory
        eff[LOSSES][i] = total - (aero + rolling + accessory)
    return eff


def total_specific_power(eff: dict[str, list[float]]) -> list[float]:
    """Per-speed sum over all causes (J/m)."""
    n = len(next(iter(eff.values()), []))
    return [sum(eff[cause][i] for cause in CAUSES) for i in range(n)]
