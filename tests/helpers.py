from __future__ import annotations

from dataclasses import replace

from drive_sim.powertrains.electric import ElectricPowertrain
from drive_sim.stepper import LimitingCause, PowerBreakdown, TickResult
from drive_sim.vehicle import Vehicle


def sample_vehicle(**overrides) -> Vehicle:
    """Light, grippy EV: 10 m/s^2 is within reach up to ~18 m/s, redline at ~52.4 m/s."""
    vehicle = Vehicle(
        name="test EV",
        mass_kg=1000.0,
        frontal_area_m2=2.0,
        drag_coefficient=0.3,
        rolling_resistance_coefficient=0.01,
        wheel_radius_m=0.3,
        traction_coefficient=1.5,
        driven_weight_fraction=1.0,
        drivetrain_efficiency=0.9,
        regen_efficiency=0.6,
        accessory_power_w=500.0,
        powertrain=ElectricPowertrain(
            max_power_w=300_000.0,
            max_torque_nm=600.0,
            gear_ratio=9.0,
            max_rpm=15_000.0,
        ),
        air_density_kg_m3=1.225,
        tick_s=0.001,
    )
    return replace(vehicle, **overrides)


def slow_vehicle(**overrides) -> Vehicle:
    """Short-geared vehicle whose redline sits well below 100 km/h (~7.85 m/s)."""
    base = sample_vehicle(
        powertrain=ElectricPowertrain(
            max_power_w=300_000.0,
            max_torque_nm=600.0,
            gear_ratio=20.0,
            max_rpm=5_000.0,
        ),
        tick_s=0.01,
    )
    return replace(base, **overrides)


class ScriptedStepper:
    """
    Stepper that replays scripted (accel, limit) ticks, repeating the last one.

    Speed and distance integrate the scripted acceleration; power is a constant
    breakdown so energy bookkeeping is easy to check.
    """

    def __init__(
        self,
        script: list[tuple[float, LimitingCause | None]],
        interval_s: float = 0.1,
        power: PowerBreakdown | None = None,
    ):
        self.script = list(script)
        self.interval_s = interval_s
        self.speed_mps = 0.0
        self.distance_m = 0.0
        self.ticks = 0
        self.power = power or PowerBreakdown()
        self.requests: list[float] = []

    @property
    def time_s(self) -> float:
        return self.ticks * self.interval_s

    def tick(self, requested_accel_mps2: float) -> TickResult:
        self.requests.append(requested_accel_mps2)
        accel, limit = self.script[min(self.ticks, len(self.script) - 1)]
        v = self.speed_mps
        v_new = max(0.0, v + accel * self.interval_s)
        self.distance_m += 0.5 * (v + v_new) * self.interval_s
        self.speed_mps = v_new
        self.ticks += 1
        return TickResult(accel_mps2=accel, limit=limit)

    def aero_drag(self) -> float:
        return 0.0

    def rolling_drag(self) -> float:
        return 0.0


def scripted(stepper: ScriptedStepper):
    """init_simulation replacement that hands out the given stepper."""
    def _init(_vehicle):
        return stepper
    return _init
