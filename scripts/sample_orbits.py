#!/usr/bin/env python3
"""Print planet positions for a date, or sample orbit polylines to disk.

Usage:
    python scripts/sample_orbits.py --date 2026-01-01
    python scripts/sample_orbits.py --save data/orbits --count 60000 --step 1
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, "src")

from config import settings
from ephemeris.bodies import ALL_BODIES
from ephemeris.keplerian import KeplerianEphemeris
from mechanics.transforms import iso_to_jd, jd_to_iso


def print_positions(ephemeris: KeplerianEphemeris, jd: float) -> None:
    print(f"Heliocentric ecliptic J2000 positions at {jd_to_iso(jd)} (JD {jd:.5f})")
    print(f"{'body':<10}{'x [AU]':>14}{'y [AU]':>14}{'z [AU]':>14}{'r [AU]':>12}")
    for body, pos in ephemeris.snapshot(jd).items():
        print(f"{body.value:<10}{pos.x:>14.8f}{pos.y:>14.8f}{pos.z:>14.8f}{pos.distance:>12.6f}")


def save_trajectories(
    ephemeris: KeplerianEphemeris,
    out_dir: Path,
    start_jd: float,
    count: int,
    step_days: float,
) -> None:
    logger = logging.getLogger("sample_orbits")
    out_dir.mkdir(parents=True, exist_ok=True)

    t0 = time.time()
    for body in ALL_BODIES:
        traj = ephemeris.trajectory(body, start_jd, count, step_days)
        path = out_dir / f"{body.value}.npy"
        np.save(path, np.column_stack([traj.epochs, traj.positions]))
        logger.info("Wrote %d samples for %s to %s", len(traj), body.value, path)
    logger.info("Done in %.1f seconds.", time.time() - t0)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Sample Keplerian planet positions")
    parser.add_argument("--date", default=None, help="Epoch for the position table (ISO)")
    parser.add_argument("--save", type=Path, default=None,
                        help="Directory to write per-body [jd, x, y, z] .npy arrays")
    parser.add_argument("--start", default=None, help="Trajectory start date (ISO, default J2000.0)")
    parser.add_argument("--count", type=int, default=settings.trajectory_sample_count,
                        help="Number of samples per body")
    parser.add_argument("--step", type=float, default=settings.trajectory_step_days,
                        help="Step size in days")
    args = parser.parse_args()

    ephemeris = KeplerianEphemeris()

    if args.save is not None:
        start_jd = iso_to_jd(args.start) if args.start else settings.trajectory_start_jd
        save_trajectories(ephemeris, args.save, start_jd, args.count, args.step)
    else:
        jd = iso_to_jd(args.date) if args.date else settings.trajectory_start_jd
        print_positions(ephemeris, jd)
