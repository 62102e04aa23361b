"""
Key-value settings provider backed by a flat YAML file.

Missing keys fall back to DEFAULT_SETTINGS. A missing file is created with
the defaults so it can be edited for the next run.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from sat_attitude.core.errors import ConfigError

logger = logging.getLogger(__name__)

SATELLITE_NAME = "ERNST"
RUN_IDENTIFIER = "i98_a700"

DEFAULT_SETTINGS: Dict[str, Any] = {
    # Satellite orbit
    "sat_altitude_m": 700000.0,
    "sat_eccentricity": 0.0,
    "sat_inclination_deg": 98.1929,
    "sat_argp_deg": 0.0,
    "sat_raan_deg": 10.5834,
    "sat_mean_anomaly_deg": 0.0,
    # Ground station
    "station_name": "Ground Station",
    "target_lat_deg": 48.001081,
    "target_lon_deg": 7.846619,
    "target_alt_m": 320.0,
    # Simulation (UTC)
    "sim_start_year": 2020,
    "sim_start_month": 1,
    "sim_start_day": 1,
    "sim_start_hour": 0,
    "sim_start_minute": 0,
    "sim_start_second": 0.0,
    "sim_duration_days": 1.0,
    "sim_time_step_s": 60.0,
    "sim_max_check_s": 60.0,
    "sim_threshold_s": 0.001,
    "sim_min_elevation_deg": 0.0,
    "propagator": "eckstein-hechler",
    "local_orbital_frame": "VVLH",
    # Export
    "satellite_name": SATELLITE_NAME,
    "exp_file_sun_angles": f"{SATELLITE_NAME}_{RUN_IDENTIFIER}_SunAngles.csv",
    "exp_file_earth_angles": f"{SATELLITE_NAME}_{RUN_IDENTIFIER}_EarthAngles.csv",
    "exp_file_access_times": f"{SATELLITE_NAME}_{RUN_IDENTIFIER}_AccessTimes.csv",
    "exp_text_format": "utf-8",
    "results_directory": "results",
}

# Accepted in place of sat_altitude_m
OPTIONAL_KEYS = frozenset({"sat_semi_major_axis_m"})


def save_settings(settings: Mapping[str, Any], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    header = f"# File generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
    with path.open("w", encoding="utf-8") as f:
        f.write(header)
        yaml.safe_dump(dict(settings), f, default_flow_style=False, sort_keys=False)


def load_settings(path: Path) -> Dict[str, Any]:
    """
    Read a flat YAML mapping and overlay it on the defaults.

    Raises:
        ConfigError: the file is not valid YAML, not a mapping, or has
            non-text keys
    """
    path = Path(path)
    settings = dict(DEFAULT_SETTINGS)

    if not path.exists():
        logger.warning("Settings file <%s> not found. Using default settings.", path)
        try:
            save_settings(settings, path)
        except OSError as exc:
            logger.warning("Could not write settings file <%s>: %s", path, exc)
        return settings

    try:
        with path.open("r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Settings file <{path}> is not valid YAML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Settings file <{path}> could not be read: {exc}") from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Settings file <{path}> must contain a mapping, got {type(loaded).__name__}.")

    bad_keys = [key for key in loaded if not isinstance(key, str)]
    if bad_keys:
        raise ConfigError(
            f"Settings file <{path}> has non-text keys: {', '.join(repr(k) for k in bad_keys)}"
        )

    unknown = sorted(set(loaded) - set(DEFAULT_SETTINGS) - OPTIONAL_KEYS)
    if unknown:
        logger.warning("Ignoring unknown settings keys: %s", ", ".join(map(str, unknown)))

    settings.update(loaded)
    logger.info("Read settings file <%s>.", path)
    return settings
