"""Acceleration profiler: latching rules, limiting-cause trace and sampling."""

from __future__ import annotations

import math
import unittest

from drive_sim.acceleration import (
    LimitingReason,
    ProfileTimeoutError,
    merge_short_limits,
    run_acceleration_profile,
)
from drive_sim.constants import KPH_100_MPS, MAX_ACCEL_REQUEST_MPS2, QUARTER_MILE_M
from drive_sim.stepper import LimitingCause, SimulationError
from tests.helpers import ScriptedStepper, sample_vehicle, scripted, slow_vehicle


T = LimitingCause.TRACTION
P = LimitingCause.POWER
R = LimitingCause.REDLINE


class AccelerationProfileTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.vehicle = sample_vehicle()
        cls.profile = run_acceleration_profile(cls.vehicle)

    def test_headline_metrics_are_ordered(self) -> None:
        p = self.profile
        self.assertGreater(p.top_speed_mps, KPH_100_MPS)
        self.assertTrue(p.reaches_100)
        self.assertGreater(p.accel_100_s, 0.0)
        self.assertLessEqual(p.accel_100_s, p.accel_top_s)
        self.assertGreater(p.quarter_mile_s, 0.0)

    def test_top_speed_is_redline(self) -> None:
        pt = self.vehicle.powertrain
        redline_mps = pt.max_rpm * 2.0 * math.pi / 60.0 * self.vehicle.wheel_radius_m / pt.gear_ratio
        self.assertAlmostEqual(self.profile.top_speed_mps, redline_mps, delta=0.05)

    def test_peak_accel_is_traction_bound(self) -> None:
        traction_accel = self.vehicle.traction_limit() / self.vehicle.mass_kg
        self.assertLess(self.profile.peak_accel_mps2, traction_accel)
        self.assertGreater(self.profile.peak_accel_mps2, 0.95 * traction_accel)

    def test_limiting_trace_sequence(self) -> None:
        self.assertEqual([r.cause for r in self.profile.limits], [T, P, R])

    def test_limit_durations_cover_the_run(self) -> None:
        p = self.profile
        total_ticks = sum(r.ticks for r in p.limits)
        self.assertAlmostEqual(total_ticks * self.vehicle.tick_s, p.elapsed_s, places=9)
        self.assertAlmostEqual(sum(r.duration_s for r in p.limits), p.elapsed_s, places=6)
        self.assertAlmostEqual(sum(p.limit_totals().values()), p.elapsed_s, places=6)

    def test_profile_sampling_rate(self) -> None:
        p = self.profile
        expected = p.elapsed_s / p.sample_interval_s
        self.assertAlmostEqual(len(p.profile_mps), expected, delta=2.0)

    def test_profile_monotonic_while_accelerating(self) -> None:
        p = self.profile
        n_accel = int(p.accel_top_s / p.sample_interval_s) - 1
        speeds = p.profile_mps[:n_accel]
        self.assertTrue(all(b >= a for a, b in zip(speeds, speeds[1:])))

    def test_slow_vehicle_has_nan_0_100(self) -> None:
        p = run_acceleration_profile(slow_vehicle())
        self.assertLess(p.top_speed_mps, KPH_100_MPS)
        self.assertTrue(math.isnan(p.accel_100_s))
        self.assertFalse(p.reaches_100)
        self.assertGreater(p.quarter_mile_s, p.accel_top_s)


class ScriptedProfileTests(unittest.TestCase):
    def test_recurring_cause_opens_new_entry(self) -> None:
        stepper = ScriptedStepper([(5.0, T), (5.0, T), (5.0, P), (5.0, T), (0.0, P)], interval_s=0.1)
        p = run_acceleration_profile(sample_vehicle(), init_simulation=scripted(stepper))

        self.assertEqual([r.cause for r in p.limits], [T, P, T, P])
        self.assertEqual([r.ticks for r in p.limits[:3]], [2, 1, 1])
        self.assertEqual(sum(r.ticks for r in p.limits), stepper.ticks)
        self.assertTrue(all(req == MAX_ACCEL_REQUEST_MPS2 for req in stepper.requests))

    def test_latches_are_set_once(self) -> None:
        stepper = ScriptedStepper([(5.0, T)] * 4 + [(0.0, P)], interval_s=0.1)
        p = run_acceleration_profile(sample_vehicle(), init_simulation=scripted(stepper))

        # Top speed latched on the fifth tick at 2 m/s and never overwritten.
        self.assertAlmostEqual(p.top_speed_mps, 2.0)
        self.assertAlmostEqual(p.accel_top_s, 0.5)
        self.assertTrue(math.isnan(p.accel_100_s))
        self.assertEqual(p.peak_accel_mps2, 5.0)
        # First tick past the quarter mile ends the run.
        self.assertGreater(stepper.distance_m, QUARTER_MILE_M)
        self.assertAlmostEqual(p.quarter_mile_s, stepper.time_s)

    def test_0_100_latched_on_first_crossing(self) -> None:
        # +1 m/s per 0.1 s tick: 100 km/h (27.78 m/s) is first exceeded on tick 28.
        stepper = ScriptedStepper([(10.0, P)] * 40 + [(0.0, R)], interval_s=0.1)
        p = run_acceleration_profile(sample_vehicle(), init_simulation=scripted(stepper))
        self.assertAlmostEqual(p.accel_100_s, 2.8)
        self.assertAlmostEqual(p.top_speed_mps, 40.0)

    def test_time_budget_raises_with_partial_profile(self) -> None:
        stepper = ScriptedStepper([(0.0, P)], interval_s=0.1)
        with self.assertRaises(ProfileTimeoutError) as ctx:
            run_acceleration_profile(sample_vehicle(), max_time_s=1.0, init_simulation=scripted(stepper))
        partial = ctx.exception.partial
        self.assertEqual(partial.top_speed_mps, 0.0)
        self.assertEqual(partial.quarter_mile_s, 0.0)
        self.assertAlmostEqual(partial.elapsed_s, 1.0)
        self.assertEqual(len(partial.limits), 1)

    def test_unconstrained_tick_is_an_error(self) -> None:
        stepper = ScriptedStepper([(1000.0, None)], interval_s=0.1)
        with self.assertRaises(SimulationError):
            run_acceleration_profile(sample_vehicle(), init_simulation=scripted(stepper))

    def test_rejects_bad_arguments(self) -> None:
        with self.assertRaises(ValueError):
            run_acceleration_profile(sample_vehicle(), sample_interval_s=0.0)
        with self.assertRaises(ValueError):
            run_acceleration_profile(sample_vehicle(), max_time_s=-1.0)


class MergeShortLimitsTests(unittest.TestCase):
    def test_short_segments_fold_forward(self) -> None:
        limits = [
            LimitingReason(T, 100, 0.1),
            LimitingReason(P, 5, 0.005),
            LimitingReason(T, 50, 0.05),
            LimitingReason(P, 200, 0.2),
            LimitingReason(R, 3, 0.003),
        ]
        merged = merge_short_limits(limits, interval_s=0.001, min_ticks=10)

        self.assertEqual([r.cause for r in merged], [T, P])
        self.assertEqual([r.ticks for r in merged], [155, 203])
        self.assertAlmostEqual(sum(r.duration_s for r in merged), 0.358)

    def test_all_short_returns_copy(self) -> None:
        limits = [LimitingReason(T, 2, 0.002), LimitingReason(P, 3, 0.003)]
        merged = merge_short_limits(limits, interval_s=0.001, min_ticks=10)
        self.assertEqual(merged, limits)
        self.assertIsNot(merged[0], limits[0])

    def test_input_not_mutated(self) -> None:
        limits = [LimitingReason(T, 100, 0.1), LimitingReason(P, 2, 0.002), LimitingReason(T, 40, 0.04)]
        merge_short_limits(limits, interval_s=0.001)
        self.assertEqual([r.ticks for r in limits], [100, 2, 40])


if __name__ == "__main__":
    unittest.main()
