"""Public entry points for the drive simulation.

This module re-exports the orchestrators and the reference vehicle model.
"""

from __future__ import annotations

# Orchestrators
from drive_sim.acceleration import (
    AccelProfile,
    LimitingReason,
    ProfileTimeoutError,
    merge_short_limits,
    run_acceleration_profile,
)
from drive_sim.efficiency import SteadyStateError, efficiency_at_speeds
from drive_sim.schedule import (
    Schedule,
    ScheduleError,
    ScheduleResult,
    constant_speed_schedule,
    load_schedule_csv,
    run_schedule,
)

# Stepper contract
from drive_sim.stepper import (
    LimitingCause,
    PowerBreakdown,
    SimulationError,
    TickResult,
    VehicleConfigError,
)

# Reference model
from drive_sim.vehicle import (
    Vehicle,
    estimate_top_speed,
    init_simulation,
    load_vehicle,
    validate_vehicle,
)


__all__ = [
    # Orchestrators
    'Schedule',
    'ScheduleResult',
    'ScheduleError',
    'run_schedule',
    'constant_speed_schedule',
    'load_schedule_csv',
    'AccelProfile',
    'LimitingReason',
    'ProfileTimeoutError',
    'run_acceleration_profile',
    'merge_short_limits',
    'SteadyStateError',
    'efficiency_at_speeds',
    # Stepper contract
    'LimitingCause',
    'PowerBreakdown',
    'TickResult',
    'SimulationError',
    'VehicleConfigError',
    # Reference model
    'Vehicle',
    'init_simulation',
    'load_vehicle',
    'estimate_top_speed',
    'validate_vehicle',
]
