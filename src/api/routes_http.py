"""HTTP REST endpoints for the Orrery API.

- /health                      — Health check
- /bodies                      — List planets with display hints and J2000 elements
- /bodies/{name}/elements      — Instantaneous orbital elements at an epoch
- /bodies/{name}/position      — Heliocentric position at an epoch
- /bodies/{name}/trajectory    — Sampled orbit polyline
- /snapshot                    — All planets at one epoch
- /time/julian-date            — ISO date -> Julian Date
- /time/calendar               — Julian Date -> ISO date
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, Request, Response
from pydantic import BaseModel

from config import settings
from ephemeris.bodies import ALL_BODIES, DISPLAY, ELEMENTS, Body, UnknownBodyError, resolve_body
from ephemeris.keplerian import KeplerianEphemeris
from mechanics.kepler import NonConvergenceError
from mechanics.orbit import Position3D
from mechanics.transforms import (
    InvalidInputError,
    compress_positions,
    compress_to_scene,
    datetime_to_jd,
    iso_to_jd,
    jd_to_iso,
    jd_to_unix_ms,
    safe_jd_to_iso,
)
from serialization.encoder import encode_snapshot, encode_trajectory

logger = logging.getLogger("orrery.api")
router = APIRouter()


# --------------------------------------------------------------------------- #
#  Response models
# --------------------------------------------------------------------------- #

class SecularElementOut(BaseModel):
    value: float
    rate: float


class BodyOut(BaseModel):
    name: str
    title: str
    color: str
    size: float
    elements: dict[str, SecularElementOut]


class ElementsOut(BaseModel):
    body: str
    epoch_jd: float
    a: float
    e: float
    I: float
    L: float
    varpi: float
    Omega: float
    omega: float
    mean_anomaly_deg: float


class PositionOut(BaseModel):
    body: str
    epoch_jd: float
    epoch_iso: str | None
    scene_units: bool
    x: float
    y: float
    z: float
    distance_au: float


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _resolve_body(identifier: str) -> Body:
    try:
        return resolve_body(identifier)
    except UnknownBodyError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _get_ephemeris(request: Request) -> KeplerianEphemeris:
    ephemeris: KeplerianEphemeris = request.app.state.ephemeris
    return ephemeris


def _resolve_epoch(jd: float | None, date: str | None) -> float:
    """Pick the query epoch: explicit JD, then ISO date, then now."""
    if jd is not None and date is not None:
        raise HTTPException(status_code=422, detail="Pass either 'jd' or 'date', not both")
    try:
        if jd is not None:
            jd_to_unix_ms(jd)  # finiteness check
            return jd
        if date is not None:
            return iso_to_jd(date)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return datetime_to_jd(datetime.now(timezone.utc))


def _to_scene(position: Position3D) -> Position3D:
    return compress_to_scene(
        position,
        padding=settings.scene_sun_padding,
        log_scale=settings.scene_log_scale,
    )


# --------------------------------------------------------------------------- #
#  Endpoints
# --------------------------------------------------------------------------- #

@router.get("/health")
async def health():
    return {"status": "ok", "service": "orrery"}


@router.get("/bodies", response_model=list[BodyOut])
async def list_bodies():
    """List all planets in the element table."""
    out = []
    for body in ALL_BODIES:
        el = ELEMENTS[body]
        display = DISPLAY[body]
        out.append(BodyOut(
            name=body.value,
            title=body.title,
            color=display.color,
            size=display.size,
            elements={
                name: SecularElementOut(value=getattr(el, name).value, rate=getattr(el, name).rate)
                for name in ("a", "e", "I", "L", "varpi", "Omega")
            },
        ))
    return out


@router.get("/bodies/{identifier}/elements", response_model=ElementsOut)
async def get_elements(
    identifier: str,
    request: Request,
    jd: float | None = Query(default=None, description="Julian Date"),
    date: str | None = Query(default=None, description="ISO date, e.g. 2026-01-01"),
):
    """Osculating elements of a body after applying secular rates."""
    body = _resolve_body(identifier)
    epoch_jd = _resolve_epoch(jd, date)
    inst = _get_ephemeris(request).elements(body, epoch_jd)
    return ElementsOut(
        body=body.value,
        epoch_jd=epoch_jd,
        a=inst.a,
        e=inst.e,
        I=inst.I,
        L=inst.L,
        varpi=inst.varpi,
        Omega=inst.Omega,
        omega=inst.omega,
        mean_anomaly_deg=inst.mean_anomaly_deg,
    )


@router.get("/bodies/{identifier}/position", response_model=PositionOut)
async def get_position(
    identifier: str,
    request: Request,
    jd: float | None = Query(default=None, description="Julian Date"),
    date: str | None = Query(default=None, description="ISO date, e.g. 2026-01-01"),
    scene_units: bool = Query(default=False),
):
    """Heliocentric ecliptic position of a body (AU, or compressed scene units)."""
    body = _resolve_body(identifier)
    epoch_jd = _resolve_epoch(jd, date)

    try:
        pos = await asyncio.to_thread(_get_ephemeris(request).position, body, epoch_jd)
    except NonConvergenceError as e:
        raise HTTPException(status_code=422, detail=str(e))

    distance_au = pos.distance
    if scene_units:
        pos = _to_scene(pos)

    return PositionOut(
        body=body.value,
        epoch_jd=epoch_jd,
        epoch_iso=safe_jd_to_iso(epoch_jd),
        scene_units=scene_units,
        x=pos.x,
        y=pos.y,
        z=pos.z,
        distance_au=distance_au,
    )


@router.get("/bodies/{identifier}/trajectory")
async def get_trajectory(
    identifier: str,
    request: Request,
    start_jd: float = Query(default=settings.trajectory_start_jd),
    count: int = Query(default=settings.trajectory_sample_count, ge=0, le=200_000),
    step_days: float = Query(default=settings.trajectory_step_days, gt=0),
    scene_units: bool = Query(default=True),
    binary: bool = Query(default=False, description="Return packed float64 instead of JSON"),
):
    """Orbit polyline: count positions at start_jd + i * step_days."""
    body = _resolve_body(identifier)
    ephemeris = _get_ephemeris(request)

    try:
        # Sampling is CPU-bound; keep it off the event loop
        traj = await asyncio.to_thread(ephemeris.trajectory, body, start_jd, count, step_days)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NonConvergenceError as e:
        raise HTTPException(status_code=422, detail=str(e))

    positions = traj.positions
    if scene_units:
        positions = compress_positions(
            positions,
            padding=settings.scene_sun_padding,
            log_scale=settings.scene_log_scale,
        )

    if binary:
        return Response(
            content=encode_trajectory(traj.start_jd, traj.step_days, positions),
            media_type="application/octet-stream",
        )

    return {
        "body": body.value,
        "start_jd": traj.start_jd,
        "step_days": traj.step_days,
        "n_points": len(traj),
        "scene_units": scene_units,
        "points": positions.tolist(),
    }


@router.get("/snapshot")
async def get_snapshot(
    request: Request,
    jd: float | None = Query(default=None, description="Julian Date"),
    date: str | None = Query(default=None, description="ISO date, e.g. 2026-01-01"),
    scene_units: bool = Query(default=True),
    binary: bool = Query(default=False),
):
    """Positions of all planets at one epoch."""
    epoch_jd = _resolve_epoch(jd, date)

    try:
        snap = await asyncio.to_thread(_get_ephemeris(request).snapshot, epoch_jd)
    except NonConvergenceError as e:
        raise HTTPException(status_code=422, detail=str(e))

    bodies_data = []
    for body, pos in snap.items():
        if scene_units:
            pos = _to_scene(pos)
        bodies_data.append({
            "body_index": ALL_BODIES.index(body),
            "name": body.value,
            "position": pos.to_list(),
        })

    if binary:
        return Response(
            content=encode_snapshot(epoch_jd, bodies_data),
            media_type="application/octet-stream",
        )

    return {
        "epoch_jd": epoch_jd,
        "epoch_iso": safe_jd_to_iso(epoch_jd),
        "scene_units": scene_units,
        "bodies": bodies_data,
    }


@router.get("/time/julian-date")
async def to_julian_date(date: str = Query(description="ISO date or datetime")):
    try:
        jd = iso_to_jd(date)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"date": date, "jd": jd, "unix_ms": jd_to_unix_ms(jd)}


@router.get("/time/calendar")
async def from_julian_date(jd: float = Query(description="Julian Date")):
    try:
        iso = jd_to_iso(jd)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"jd": jd, "iso": iso, "unix_ms": jd_to_unix_ms(jd)}
