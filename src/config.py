from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Kepler solver
    kepler_tolerance: float = 1e-6  # radians
    kepler_max_iterations: int = 50

    # Trajectory sampling (orbit polylines)
    trajectory_start_jd: float = 2451545.0  # J2000.0
    trajectory_sample_count: int = 60000
    trajectory_step_days: float = 1.0
    trajectory_cache_size: int = 32

    # Scene compression: r_scene = log10(r_au + 1) * scene_log_scale + scene_sun_padding
    scene_sun_padding: float = 10.0
    scene_log_scale: float = 50.0

    # Live position stream
    stream_speed_days: float = 20.0  # simulated days per real-time second
    stream_fps: int = 30

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
