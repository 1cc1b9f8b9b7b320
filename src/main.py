from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from api.routes_http import router as http_router
from api.routes_ws import router as ws_router
from ephemeris.bodies import ALL_BODIES
from ephemeris.keplerian import default_ephemeris

logger = logging.getLogger("orrery")
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: attach the Keplerian ephemeris. Shutdown: drop cached trajectories."""
    ephemeris = default_ephemeris()
    logger.info(
        "Keplerian ephemeris ready — %d bodies, tolerance=%g rad, max_iterations=%d",
        len(ALL_BODIES), ephemeris.tolerance, ephemeris.max_iterations,
    )
    app.state.ephemeris = ephemeris
    yield
    ephemeris.clear_cache()
    logger.info("Shutting down Orrery")


app = FastAPI(
    title="Orrery — Keplerian Planet Positions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(http_router)
app.include_router(ws_router)


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.reload)
