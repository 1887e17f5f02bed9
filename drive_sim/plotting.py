from __future__ import annotations

from pathlib import Path

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from drive_sim.acceleration import AccelProfile
from drive_sim.constants import KPH_100_MPS, mps_to_kph
from drive_sim.efficiency import CAUSES
from drive_sim.schedule import Schedule
from drive_sim.stepper import LimitingCause


CAUSE_COLORS = {
    LimitingCause.TRACTION: "tab:orange",
    LimitingCause.TORQUE: "tab:blue",
    LimitingCause.POWER: "tab:green",
    LimitingCause.REDLINE: "tab:red",
    LimitingCause.BRAKING: "tab:purple",
}


def plot_accel_profile(profile: AccelProfile, out_path: Path, title: str = "") -> None:
    """Speed vs time with the limiting cause shaded underneath."""
    speed_kph = np.asarray([mps_to_kph(v) for v in profile.profile_mps], dtype=float)
    time_s = (np.arange(speed_kph.size) + 1) * profile.sample_interval_s

    fig, ax = plt.subplots(figsize=(12, 6))

    t = 0.0
    labelled: set[LimitingCause] = set()
    for r in profile.limits:
        label = None if r.cause in labelled else r.cause.value
        labelled.add(r.cause)
        ax.axvspan(t, t + r.duration_s, color=CAUSE_COLORS.get(r.cause, "gray"), alpha=0.15, linewidth=0.0, label=label)
        t += r.duration_s

    ax.plot(time_s, speed_kph, color="black", linewidth=1.5, label="speed")
    ax.axhline(y=mps_to_kph(KPH_100_MPS), color="gray", linewidth=0.8, linestyle="--")
    if profile.quarter_mile_s > 0.0:
        ax.axvline(x=profile.quarter_mile_s, color="gray", linewidth=0.8, linestyle=":", label="quarter mile")

    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Speed (km/h)")
    ax.set_title(title or "Standing-Start Acceleration")
    ax.set_xlim(0, max(t, float(time_s[-1]) if time_s.size else 0.0))
    ax.grid(True, alpha=0.3)
    ax.legend(loc="lower right", fontsize=8)

    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close(fig)


def plot_efficiency(speeds_mps: list[float], eff: dict[str, list[float]], out_path: Path, title: str = "") -> None:
    """Stacked bars of specific power (Wh/km) per cause at each cruise speed."""
    speeds_kph = [mps_to_kph(v) for v in speeds_mps]
    x = np.arange(len(speeds_kph))
    colors = plt.cm.viridis(np.linspace(0, 0.9, len(CAUSES)))

    fig, ax = plt.subplots(figsize=(10, 6))
    bottom = np.zeros(len(speeds_kph), dtype=float)
    for i, cause in enumerate(CAUSES):
        values = np.asarray(eff[cause], dtype=float) / 3.6
        ax.bar(x, values, bottom=bottom, color=colors[i], label=cause)
        bottom += values

    ax.set_xticks(x)
    ax.set_xticklabels([f"{v:.0f}" for v in speeds_kph])
    ax.set_xlabel("Cruise speed (km/h)")
    ax.set_ylabel("Consumption (Wh/km)")
    ax.set_title(title or "Cruise Loss Breakdown")
    ax.grid(True, axis="y", alpha=0.3)
    ax.legend(fontsize=8)

    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close(fig)


def plot_schedule(schedule: Schedule, out_path: Path, title: str = "") -> None:
    time_s = np.arange(len(schedule.speeds_mps)) * schedule.interval_s
    speed_kph = np.asarray([mps_to_kph(v) for v in schedule.speeds_mps], dtype=float)

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(time_s, speed_kph, color="tab:blue", linewidth=1.2)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Target speed (km/h)")
    ax.set_title(title or "Speed Schedule")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close(fig)
