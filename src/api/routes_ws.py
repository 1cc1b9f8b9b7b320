"""WebSocket endpoint for real-time streaming.

- /ws/ephemeris/stream — Stream planetary positions for animation
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from config import settings
from ephemeris.bodies import ALL_BODIES, Body, UnknownBodyError, resolve_body
from ephemeris.keplerian import KeplerianEphemeris
from mechanics.kepler import NonConvergenceError
from mechanics.transforms import (
    InvalidInputError,
    compress_to_scene,
    datetime_to_jd,
    require_finite,
    safe_jd_to_iso,
)
from serialization.encoder import encode_snapshot

logger = logging.getLogger("orrery.ws")
router = APIRouter()


class StreamConfig:
    """Mutable per-connection stream parameters."""

    def __init__(self, start_jd: float) -> None:
        self.bodies: list[Body] = list(ALL_BODIES)
        self.current_jd: float = start_jd
        self.speed: float = settings.stream_speed_days  # days per real-time second
        self.fps: int = settings.stream_fps
        self.scene_units: bool = True
        self.binary: bool = False

    @property
    def dt_per_frame(self) -> float:
        return self.speed / self.fps

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.fps

    def update(self, message: dict) -> None:
        """Apply a JSON config message; raises InvalidInputError / UnknownBodyError.

        Every key is validated before any is applied, so a rejected message
        leaves the stream unchanged.
        """
        if not isinstance(message, dict):
            raise InvalidInputError(f"Config must be a JSON object, got {type(message).__name__}")
        changes: dict = {}
        if "bodies" in message:
            bodies = message["bodies"]
            if not isinstance(bodies, list):
                raise InvalidInputError(f"bodies must be a list of names, got {bodies!r}")
            changes["bodies"] = [resolve_body(b) for b in bodies]
        if "start_jd" in message:
            changes["current_jd"] = require_finite(message["start_jd"], "start_jd")
        if "speed" in message:
            changes["speed"] = require_finite(message["speed"], "speed")
        if "fps" in message:
            changes["fps"] = min(60, max(1, int(require_finite(message["fps"], "fps"))))
        if "scene_units" in message:
            changes["scene_units"] = bool(message["scene_units"])
        if "binary" in message:
            changes["binary"] = bool(message["binary"])
        for name, value in changes.items():
            setattr(self, name, value)


def build_frame(ephemeris: KeplerianEphemeris, cfg: StreamConfig) -> list[dict]:
    bodies_data = []
    for body, pos in ephemeris.snapshot(cfg.current_jd, cfg.bodies).items():
        if cfg.scene_units:
            pos = compress_to_scene(
                pos,
                padding=settings.scene_sun_padding,
                log_scale=settings.scene_log_scale,
            )
        bodies_data.append({
            "body_index": ALL_BODIES.index(body),
            "name": body.value,
            "position": pos.to_list(),
        })
    return bodies_data


@router.websocket("/ws/ephemeris/stream")
async def ws_ephemeris_stream(websocket: WebSocket):
    """Stream planetary positions for real-time 3D animation.

    Protocol:
    1. Client sends a JSON config message (every key optional):
       {
         "bodies": ["earth", "mars"],     // default: all planets
         "start_jd": 2460000.5,           // default: now
         "speed": 20.0,                   // simulated days per real-time second
         "fps": 30,                       // frames per second, clamped to [1, 60]
         "scene_units": true,             // log-compressed scene coordinates
         "binary": false                  // packed snapshot instead of JSON
       }
    2. Server streams one snapshot per frame, advancing jd by speed / fps.
    3. Client can send "pause", "resume", "stop", or a new config.
    """
    await websocket.accept()
    logger.info("Ephemeris stream WebSocket connected")

    ephemeris: KeplerianEphemeris = websocket.app.state.ephemeris
    cfg = StreamConfig(start_jd=datetime_to_jd(datetime.now(timezone.utc)))
    paused = False

    try:
        # Wait for initial config
        try:
            config_raw = await asyncio.wait_for(websocket.receive_text(), timeout=5.0)
            cfg.update(json.loads(config_raw))
        except asyncio.TimeoutError:
            pass
        except (json.JSONDecodeError, InvalidInputError, UnknownBodyError) as e:
            await websocket.send_json({"status": "error", "message": str(e)})

        while True:
            # Check for control messages (non-blocking)
            try:
                msg = await asyncio.wait_for(websocket.receive_text(), timeout=0.001)
                command = msg.strip().lower()

                if command == "pause":
                    paused = True
                    continue
                elif command == "resume":
                    paused = False
                    continue
                elif command == "stop":
                    break
                else:
                    try:
                        cfg.update(json.loads(msg))
                    except (json.JSONDecodeError, InvalidInputError, UnknownBodyError) as e:
                        await websocket.send_json({"status": "error", "message": str(e)})

            except asyncio.TimeoutError:
                pass

            if paused:
                await asyncio.sleep(cfg.frame_interval)
                continue

            try:
                bodies_data = build_frame(ephemeris, cfg)
            except NonConvergenceError as e:
                logger.warning("Skipping frame at JD %.5f: %s", cfg.current_jd, e)
                bodies_data = None

            if bodies_data is not None:
                if cfg.binary:
                    await websocket.send_bytes(encode_snapshot(cfg.current_jd, bodies_data))
                else:
                    await websocket.send_json({
                        "epoch_jd": cfg.current_jd,
                        "epoch_iso": safe_jd_to_iso(cfg.current_jd),
                        "bodies": bodies_data,
                    })

            cfg.current_jd += cfg.dt_per_frame
            await asyncio.sleep(cfg.frame_interval)

    except WebSocketDisconnect:
        logger.info("Ephemeris stream WebSocket disconnected")
    finally:
        try:
            await websocket.close()
        except RuntimeError:
            pass
