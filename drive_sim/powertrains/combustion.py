"""Stepped-gear combustion engine with a tabulated full-load torque curve.

The best gear (highest wheel force below redline) is chosen every tick; shift
time is not modeled. Below idle the clutch slips, so the engine is held at
idle speed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from drive_sim.settings import req_float
from drive_sim.stepper import LimitingCause, VehicleConfigError


@dataclass(frozen=True)
class CombustionPowertrain:
    torque_curve_rpm: np.ndarray
    torque_curve_nm: np.ndarray
    gear_ratios: tuple[float, ...]
    final_drive: float
    idle_rpm: float
    max_rpm: float

    @property
    def peak_power_rpm(self) -> float:
        power = self.torque_curve_nm * self.torque_curve_rpm
        return float(self.torque_curve_rpm[int(np.argmax(power))])

    def engine_rpm(self, speed_mps: float, wheel_radius_m: float, gear: int) -> float:
        ratio = self.gear_ratios[gear] * self.final_drive
        rpm = speed_mps / wheel_radius_m * ratio * 60.0 / (2.0 * math.pi)
        return max(rpm, self.idle_rpm)

    def select_gear(self, speed_mps: float, wheel_radius_m: float) -> tuple[int, float] | None:
        """Return (gear index, engine torque) giving the most wheel force, or None past redline."""
        best: tuple[int, float] | None = None
        best_force = -1.0
        for gear, ratio in enumerate(self.gear_ratios):
            rpm = self.engine_rpm(speed_mps, wheel_radius_m, gear)
            if rpm >= self.max_rpm:
                continue
            torque = float(np.interp(rpm, self.torque_curve_rpm, self.torque_curve_nm))
            force = torque * ratio
            if force > best_force:
                best_force = force
                best = (gear, torque)
        return best

    def max_wheel_force(
        self,
        speed_mps: float,
        wheel_radius_m: float,
        efficiency: float,
    ) -> tuple[float, LimitingCause]:
        selected = self.select_gear(speed_mps, wheel_radius_m)
        if selected is None:
            return 0.0, LimitingCause.REDLINE

        gear, torque = selected
        ratio = self.gear_ratios[gear] * self.final_drive
        force = torque * ratio * efficiency / wheel_radius_m

        # Past the power peak the engine is power-bound rather than torque-bound.
        rpm = self.engine_rpm(speed_mps, wheel_radius_m, gear)
        cause = LimitingCause.POWER if rpm >= self.peak_power_rpm else LimitingCause.TORQUE
        return force, cause


def build(spec: dict) -> CombustionPowertrain:
    curve = spec.get('torque_curve')
    if not isinstance(curve, list) or len(curve) < 2:
        raise VehicleConfigError('Combustion powertrain needs a torque_curve of at least two [rpm, Nm] points.')
    table = np.asarray(curve, dtype=float)
    if table.ndim != 2 or table.shape[1] != 2:
        raise VehicleConfigError('torque_curve entries must be [rpm, Nm] pairs.')
    order = np.argsort(table[:, 0])
    table = table[order]

    ratios = spec.get('gear_ratios')
    if not isinstance(ratios, list) or not ratios:
        raise VehicleConfigError('Combustion powertrain needs a non-empty gear_ratios list.')

    pt = CombustionPowertrain(
        torque_curve_rpm=table[:, 0],
        torque_curve_nm=table[:, 1],
        gear_ratios=tuple(float(r) for r in ratios),
        final_drive=req_float(spec, ['final_drive']),
        idle_rpm=req_float(spec, ['idle_rpm']),
        max_rpm=req_float(spec, ['max_rpm']),
    )

    if any(r <= 0.0 for r in pt.gear_ratios) or pt.final_drive <= 0.0:
        raise VehicleConfigError('Gear ratios and final drive must be positive.')
    if not 0.0 < pt.idle_rpm < pt.max_rpm:
        raise VehicleConfigError('idle_rpm must be positive and below max_rpm.')
    if np.any(pt.torque_curve_nm < 0.0):
        raise VehicleConfigError('torque_curve torques must be non-negative.')
    return pt
