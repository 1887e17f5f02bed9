from __future__ import annotations


G0 = 9.80665

KPH_TO_MPS = 1.0 / 3.6
MPH_TO_MPS = 0.44704

# Reference speed for the 0-100 km/h benchmark
KPH_100_MPS = 100.0 * KPH_TO_MPS

# Quarter mile in meters
QUARTER_MILE_M = 402.336

# Far beyond any vehicle; the stepper clamps it to what is achievable.
MAX_ACCEL_REQUEST_MPS2 = 1000.0

# Achieved acceleration below this counts as top speed reached.
TOP_SPEED_ACCEL_THRESHOLD_MPS2 = 0.05

# Steady-state tolerance for cruise efficiency queries.
STEADY_STATE_TOLERANCE_MPS2 = 0.01

# Tolerance when comparing stepper time against checkpoint times.
TIME_EPS_S = 1e-9

# Fraction above redline within which the rev limiter can still hold speed.
LIMITER_BAND = 0.01


def kph_to_mps(v_kph: float) -> float:
    return float(v_kph) * KPH_TO_MPS


def mps_to_kph(v_mps: float) -> float:
    return float(v_mps) / KPH_TO_MPS
