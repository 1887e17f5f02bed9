from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from drive_sim.stepper import LimitingCause
from . import combustion, electric


class Powertrain(Protocol):
    def max_wheel_force(
        self,
        speed_mps: float,
        wheel_radius_m: float,
        efficiency: float,
    ) -> tuple[float, LimitingCause]: ...


@dataclass
class PowertrainType:
    name: str
    build: Callable[[dict], Powertrain]


POWERTRAIN_TYPES: dict[str, PowertrainType] = {
    "electric": PowertrainType(name="electric", build=electric.build),
    "combustion": PowertrainType(name="combustion", build=combustion.build),
}


def get_powertrain(name: str) -> PowertrainType:
    key = name.strip().lower()
    if key not in POWERTRAIN_TYPES:
        valid = ", ".join(POWERTRAIN_TYPES.keys())
        raise ValueError(f"Unknown powertrain type '{name}'. Available: {valid}")
    return POWERTRAIN_TYPES[key]


def build_powertrain(spec: dict) -> Powertrain:
    return get_powertrain(str(spec.get("type", ""))).build(spec)
