"""Compact binary encoding of positions for the frontend.

All values little-endian; float arrays are contiguous float64 so the
client can view them directly as a Float64Array.

Snapshot:   [epoch_jd:f64][n_bodies:u32][(body_index:i32, x:f64, y:f64, z:f64)*n]
Trajectory: [start_jd:f64][step_days:f64][n_points:u32][positions:f64 * 3n]
"""

from __future__ import annotations

import logging
import struct

import numpy as np

logger = logging.getLogger("orrery.serialization")

SNAPSHOT_HEADER = struct.Struct("<dI")
SNAPSHOT_ENTRY = struct.Struct("<iddd")
TRAJECTORY_HEADER = struct.Struct("<ddI")


def encode_snapshot(epoch_jd: float, bodies: list[dict]) -> bytes:
    """Encode a position snapshot.

    bodies: list of {"body_index": int, "position": (x, y, z)}
    """
    parts = [SNAPSHOT_HEADER.pack(epoch_jd, len(bodies))]
    for b in bodies:
        x, y, z = b["position"]
        parts.append(SNAPSHOT_ENTRY.pack(b["body_index"], x, y, z))
    return b"".join(parts)


def decode_snapshot(data: bytes) -> tuple[float, list[dict]]:
    epoch_jd, n = SNAPSHOT_HEADER.unpack_from(data, 0)
    bodies = []
    offset = SNAPSHOT_HEADER.size
    for _ in range(n):
        index, x, y, z = SNAPSHOT_ENTRY.unpack_from(data, offset)
        bodies.append({"body_index": index, "position": (x, y, z)})
        offset += SNAPSHOT_ENTRY.size
    return epoch_jd, bodies


def encode_trajectory(start_jd: float, step_days: float, positions: np.ndarray) -> bytes:
    """Encode an (N, 3) polyline sampled at start_jd + i * step_days."""
    positions = np.ascontiguousarray(positions, dtype="<f8").reshape(-1, 3)
    header = TRAJECTORY_HEADER.pack(start_jd, step_days, len(positions))
    logger.debug("Encoded trajectory with %d points", len(positions))
    return header + positions.tobytes()


def decode_trajectory(data: bytes) -> tuple[float, float, np.ndarray]:
    start_jd, step_days, n = TRAJECTORY_HEADER.unpack_from(data, 0)
    positions = np.frombuffer(
        data, dtype="<f8", count=3 * n, offset=TRAJECTORY_HEADER.size,
    ).reshape(n, 3)
    return start_jd, step_days, positions
