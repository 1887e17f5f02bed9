"""Reference longitudinal vehicle model used as the simulation stepper.

Point-mass model: powertrain and traction bound the drive force, traction on
all wheels bounds the braking force, and road load is aerodynamic drag plus
rolling resistance. Any clamp of the requested acceleration is reported as a
`LimitingCause` alongside the achieved acceleration.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

from scipy.optimize import brentq

from drive_sim.constants import G0, LIMITER_BAND
from drive_sim.powertrains import Powertrain, build_powertrain
from drive_sim.settings import load_json, req_float, req_str
from drive_sim.stepper import LimitingCause, PowerBreakdown, TickResult, VehicleConfigError


# Search range for the drag-limited top speed (m/s)
TOP_SPEED_SEARCH_MIN_MPS = 0.1
TOP_SPEED_SEARCH_MAX_MPS = 250.0
TOP_SPEED_SEARCH_STEP_MPS = 1.0


@dataclass
class Vehicle:
    name: str
    mass_kg: float
    frontal_area_m2: float
    drag_coefficient: float
    rolling_resistance_coefficient: float
    wheel_radius_m: float
    traction_coefficient: float
    driven_weight_fraction: float
    drivetrain_efficiency: float
    regen_efficiency: float
    accessory_power_w: float
    powertrain: Powertrain
    air_density_kg_m3: float = 1.225
    tick_s: float = 0.001

    def aero_drag_at(self, speed_mps: float) -> float:
        return 0.5 * self.air_density_kg_m3 * self.drag_coefficient * self.frontal_area_m2 * speed_mps * speed_mps

    def rolling_drag_at(self, speed_mps: float) -> float:
        return self.rolling_resistance_coefficient * self.mass_kg * G0

    def road_load_at(self, speed_mps: float) -> float:
        return self.aero_drag_at(speed_mps) + self.rolling_drag_at(speed_mps)

    def traction_limit(self) -> float:
        return self.traction_coefficient * self.mass_kg * G0 * self.driven_weight_fraction

    def braking_limit(self) -> float:
        # Brakes act on every wheel.
        return self.traction_coefficient * self.mass_kg * G0

    def max_drive_force(self, speed_mps: float) -> tuple[float, LimitingCause]:
        """Largest tractive force at this speed and the constraint that sets it."""
        force, cause = self.powertrain.max_wheel_force(speed_mps, self.wheel_radius_m, self.drivetrain_efficiency)
        if cause is LimitingCause.REDLINE:
            # The rev limiter holds speed just past redline: it supplies road load and nothing more.
            below, below_cause = self.powertrain.max_wheel_force(
                speed_mps / (1.0 + LIMITER_BAND), self.wheel_radius_m, self.drivetrain_efficiency
            )
            force = 0.0 if below_cause is LimitingCause.REDLINE else min(self.road_load_at(speed_mps), below)
        traction = self.traction_limit()
        if traction < force:
            return traction, LimitingCause.TRACTION
        return force, cause


def check_vehicle(vehicle: Vehicle) -> None:
    positive = {
        'mass_kg': vehicle.mass_kg,
        'wheel_radius_m': vehicle.wheel_radius_m,
        'tick_s': vehicle.tick_s,
        'traction_coefficient': vehicle.traction_coefficient,
        'air_density_kg_m3': vehicle.air_density_kg_m3,
    }
    for name, value in positive.items():
        if not (math.isfinite(value) and value > 0.0):
            raise VehicleConfigError(f'Vehicle {name} must be positive and finite (got {value!r}).')

    non_negative = {
        'frontal_area_m2': vehicle.frontal_area_m2,
        'drag_coefficient': vehicle.drag_coefficient,
        'rolling_resistance_coefficient': vehicle.rolling_resistance_coefficient,
        'accessory_power_w': vehicle.accessory_power_w,
    }
    for name, value in non_negative.items():
        if not (math.isfinite(value) and value >= 0.0):
            raise VehicleConfigError(f'Vehicle {name} must be non-negative (got {value!r}).')

    if not 0.0 < vehicle.drivetrain_efficiency <= 1.0:
        raise VehicleConfigError('drivetrain_efficiency must be in (0, 1].')
    if not 0.0 <= vehicle.regen_efficiency <= 1.0:
        raise VehicleConfigError('regen_efficiency must be in [0, 1].')
    if not 0.0 < vehicle.driven_weight_fraction <= 1.0:
        raise VehicleConfigError('driven_weight_fraction must be in (0, 1].')


class Simulation:
    """One vehicle run: fixed tick, kinematic state and last-tick power breakdown."""

    def __init__(self, vehicle: Vehicle):
        self.vehicle = vehicle
        self.interval_s = float(vehicle.tick_s)
        self.speed_mps = 0.0
        self.distance_m = 0.0
        self.ticks = 0
        self.power = PowerBreakdown()

    @property
    def time_s(self) -> float:
        # Derived from the tick count so long runs do not drift.
        return self.ticks * self.interval_s

    def aero_drag(self) -> float:
        return self.vehicle.aero_drag_at(self.speed_mps)

    def rolling_drag(self) -> float:
        return self.vehicle.rolling_drag_at(self.speed_mps)

    def tick(self, requested_accel_mps2: float) -> TickResult:
        veh = self.vehicle
        dt = self.interval_s
        v = self.speed_mps

        f_aero = self.aero_drag()
        f_roll = self.rolling_drag()
        resist = f_aero + f_roll

        limit: LimitingCause | None = None
        if v <= 0.0 and requested_accel_mps2 <= 0.0:
            # Standing still: nothing to brake, no reversing.
            force = 0.0
            accel = 0.0
        else:
            drive, drive_cause = veh.max_drive_force(v)
            brake = veh.braking_limit()
            required = veh.mass_kg * requested_accel_mps2 + resist

            if required > drive:
                force = drive
                limit = drive_cause
            elif required < -brake:
                force = -brake
                limit = LimitingCause.BRAKING
            else:
                force = required

            accel = (force - resist) / veh.mass_kg
            if v <= 0.0 and accel < 0.0:
                accel = 0.0

        v_new = max(0.0, v + accel * dt)
        self.distance_m += 0.5 * (v + v_new) * dt

        p_aero = f_aero * v
        p_roll = f_roll * v
        p_inertia = veh.mass_kg * accel * v
        p_wheel = p_aero + p_roll + p_inertia
        if p_wheel > 0.0:
            p_input = p_wheel / veh.drivetrain_efficiency
        else:
            p_input = p_wheel * veh.regen_efficiency

        self.power = PowerBreakdown(
            aerodynamics=p_aero,
            rolling_resistance=p_roll,
            accessory=veh.accessory_power_w,
            inertia=p_inertia,
            driveline=p_input - p_wheel,
        )

        self.speed_mps = v_new
        self.ticks += 1
        return TickResult(accel_mps2=accel, limit=limit)


def init_simulation(vehicle: Vehicle) -> Simulation:
    check_vehicle(vehicle)
    return Simulation(vehicle)


def _net_force(vehicle: Vehicle, speed_mps: float) -> float:
    # Raw powertrain force (zero past redline) so the root lands on the redline itself.
    drive, _ = vehicle.powertrain.max_wheel_force(speed_mps, vehicle.wheel_radius_m, vehicle.drivetrain_efficiency)
    drive = min(drive, vehicle.traction_limit())
    return drive - vehicle.road_load_at(speed_mps)


def estimate_top_speed(vehicle: Vehicle) -> float:
    """
    Speed (m/s) where the best available tractive force equals road load.

    Scans upward for the first sign change of the net force, then refines it
    with Brent's method. A rev-limited vehicle converges to its redline speed.
    """
    check_vehicle(vehicle)

    lo = TOP_SPEED_SEARCH_MIN_MPS
    f_lo = _net_force(vehicle, lo)
    if f_lo <= 0.0:
        raise VehicleConfigError(
            f'Vehicle {vehicle.name!r} cannot overcome road load from standstill '
            f'(net force {f_lo:.1f} N at {lo:.1f} m/s).'
        )

    hi = lo
    while hi < TOP_SPEED_SEARCH_MAX_MPS:
        hi = min(hi + TOP_SPEED_SEARCH_STEP_MPS, TOP_SPEED_SEARCH_MAX_MPS)
        if _net_force(vehicle, hi) <= 0.0:
            return float(brentq(lambda v: _net_force(vehicle, v), lo, hi, xtol=1e-6))
        lo = hi

    raise VehicleConfigError(
        f'Vehicle {vehicle.name!r} has no drag-limited top speed below {TOP_SPEED_SEARCH_MAX_MPS:.0f} m/s.'
    )


def validate_vehicle(vehicle: Vehicle) -> float:
    """
    Check that a standing-start run terminates: the vehicle must leave
    standstill and settle at a finite top speed. Returns the estimated top
    speed (m/s).
    """
    return estimate_top_speed(vehicle)


def vehicle_from_dict(doc: dict) -> Vehicle:
    powertrain_spec = doc.get('powertrain')
    if not isinstance(powertrain_spec, dict):
        raise KeyError('Missing required config key: powertrain')

    vehicle = Vehicle(
        name=req_str(doc, ['name']),
        mass_kg=req_float(doc, ['mass_kg']),
        frontal_area_m2=req_float(doc, ['frontal_area_m2']),
        drag_coefficient=req_float(doc, ['drag_coefficient']),
        rolling_resistance_coefficient=req_float(doc, ['rolling_resistance_coefficient']),
        wheel_radius_m=req_float(doc, ['wheel_radius_m']),
        traction_coefficient=req_float(doc, ['traction_coefficient']),
        driven_weight_fraction=req_float(doc, ['driven_weight_fraction']),
        drivetrain_efficiency=req_float(doc, ['drivetrain_efficiency']),
        regen_efficiency=req_float(doc, ['regen_efficiency']),
        accessory_power_w=req_float(doc, ['accessory_power_w']),
        powertrain=build_powertrain(powertrain_spec),
        air_density_kg_m3=req_float(doc, ['air_density_kg_m3']),
        tick_s=req_float(doc, ['tick_ms']) / 1000.0,
    )
    check_vehicle(vehicle)
    return vehicle


def load_vehicle(path: Path) -> Vehicle:
    return vehicle_from_dict(load_json(path))
