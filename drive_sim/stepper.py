"""Contract between the orchestrators and a per-tick vehicle simulation.

Any object satisfying `SimulationStepper` can be driven by the schedule
executor, the acceleration profiler and the efficiency analyzer. The reference
implementation lives in `drive_sim.vehicle`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class LimitingCause(str, Enum):
    """Physical constraint that capped the achieved acceleration on a tick."""

    TRACTION = 'Traction'
    TORQUE = 'Torque'
    POWER = 'Power'
    REDLINE = 'Redline'
    BRAKING = 'Braking'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TickResult:
    accel_mps2: float
    limit: LimitingCause | None = None

    @property
    def limited(self) -> bool:
        return self.limit is not None


@dataclass(frozen=True)
class PowerBreakdown:
    """Instantaneous power (W) attributed to each physical cause for one tick.

    Sign convention: positive power is drawn from the energy store.
    `inertia` is the rate of change of kinetic energy and `driveline` is
    whatever the powertrain consumes (or fails to recover) beyond the wheels.
    """

    aerodynamics: float = 0.0
    rolling_resistance: float = 0.0
    accessory: float = 0.0
    inertia: float = 0.0
    driveline: float = 0.0

    def total(self) -> float:
        return self.aerodynamics + self.rolling_resistance + self.accessory + self.inertia + self.driveline


class SimulationError(RuntimeError):
    pass


class VehicleConfigError(ValueError):
    pass


class SimulationStepper(Protocol):
    speed_mps: float
    distance_m: float
    ticks: int
    interval_s: float
    power: PowerBreakdown

    @property
    def time_s(self) -> float: ...

    def tick(self, requested_accel_mps2: float) -> TickResult: ...

    def aero_drag(self) -> float: ...

    def rolling_drag(self) -> float: ...


InitSimulation = Callable[[Any], SimulationStepper]
