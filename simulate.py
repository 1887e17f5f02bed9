#!/usr/bin/env -S uv run

from __future__ import annotations

import argparse
from pathlib import Path

from drive_sim.commands import run_accel_command, run_efficiency_command, run_schedule_command


def main() -> None:
    parser = argparse.ArgumentParser(description="Vehicle drive-cycle, acceleration and cruise-efficiency simulation.")
    parser.add_argument("--schedule", action="store_true", help="Drive the configured speed schedule and report energy and distance.")
    parser.add_argument("--accel", action="store_true", help="Run a standing-start acceleration profile (0-100, quarter mile, top speed).")
    parser.add_argument("--efficiency", action="store_true", help="Break down cruise power at the configured speeds.")
    parser.add_argument("--config", type=Path, default=None, help="Config file (default: config.json at the repo root).")
    args = parser.parse_args()

    if sum([args.schedule, args.accel, args.efficiency]) > 1:
        raise SystemExit("Choose only one: --schedule OR --accel OR --efficiency (or none to run all).")

    if args.schedule:
        run_schedule_command(config_path=args.config)
        return

    if args.accel:
        run_accel_command(config_path=args.config)
        return

    if args.efficiency:
        run_efficiency_command(config_path=args.config)
        return

    # Normal run: everything
    run_schedule_command(config_path=args.config)
    print()
    run_accel_command(config_path=args.config)
    print()
    run_efficiency_command(config_path=args.config)


if __name__ == "__main__":
    main()
