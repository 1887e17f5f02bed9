"""Single-reduction electric drive: constant torque up to base speed, then constant power."""

from __future__ import annotations

import math
from dataclasses import dataclass

from drive_sim.settings import req_float
from drive_sim.stepper import LimitingCause, VehicleConfigError


@dataclass(frozen=True)
class ElectricPowertrain:
    max_power_w: float
    max_torque_nm: float
    gear_ratio: float
    max_rpm: float

    def motor_rpm(self, speed_mps: float, wheel_radius_m: float) -> float:
        return speed_mps / wheel_radius_m * self.gear_ratio * 60.0 / (2.0 * math.pi)

    def max_wheel_force(
        self,
        speed_mps: float,
        wheel_radius_m: float,
        efficiency: float,
    ) -> tuple[float, LimitingCause]:
        if self.motor_rpm(speed_mps, wheel_radius_m) >= self.max_rpm:
            return 0.0, LimitingCause.REDLINE

        torque_force = self.max_torque_nm * self.gear_ratio * efficiency / wheel_radius_m
        if speed_mps <= 0.0:
            return torque_force, LimitingCause.TORQUE

        power_force = self.max_power_w * efficiency / speed_mps
        if power_force < torque_force:
            return power_force, LimitingCause.POWER
        return torque_force, LimitingCause.TORQUE


def build(spec: dict) -> ElectricPowertrain:
    pt = ElectricPowertrain(
        max_power_w=req_float(spec, ['max_power_kw']) * 1000.0,
        max_torque_nm=req_float(spec, ['max_torque_nm']),
        gear_ratio=req_float(spec, ['gear_ratio']),
        max_rpm=req_float(spec, ['max_rpm']),
    )
    for name in ('max_power_w', 'max_torque_nm', 'gear_ratio', 'max_rpm'):
        if getattr(pt, name) <= 0.0:
            raise VehicleConfigError(f'Electric powertrain {name} must be positive.')
    return pt
