from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from sat_attitude.core.constants import R_EARTH_KM
from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import ConfigError, OrbitDegenerateError
from sat_attitude.core.frames import LofType
from sat_attitude.core.propagator import KeplerianModel, PropagatorModel, ZonalHarmonicModel
from sat_attitude.objects.ground_station import GroundStation
from sat_attitude.physics.orbit import OrbitalElements

PROPAGATOR_MODELS: Dict[str, PropagatorModel] = {
    "keplerian": KeplerianModel(),
    "eckstein-hechler": ZonalHarmonicModel(),
    "zonal": ZonalHarmonicModel(),
}


@dataclass(frozen=True)
class OutputSettings:
    results_directory: str = "results"
    satellite_name: str = "SAT"
    sun_angles_file: str = "SunAngles.csv"
    earth_angles_file: str = "EarthAngles.csv"
    access_times_file: str = "AccessTimes.csv"
    encoding: str = "utf-8"

    def path_for(self, filename: str) -> Path:
        return Path(self.results_directory) / filename


@dataclass(frozen=True)
class ScenarioConfig:
    """
    Everything one run needs, built once and passed to the engine.
    Keep this pure: just validated data, no stepping logic.
    """
    start: Epoch
    duration_s: float
    time_step_s: float
    elements: OrbitalElements
    station: GroundStation
    min_elevation_deg: float = 0.0
    max_check_s: float = 60.0
    threshold_s: float = 0.001
    propagator_model: PropagatorModel = ZonalHarmonicModel()
    lof_type: LofType = LofType.VVLH
    output: OutputSettings = OutputSettings()

    def __post_init__(self):
        errors: List[str] = []
        if not (self.duration_s > 0 and math.isfinite(self.duration_s)):
            errors.append(f"duration must be > 0 s and finite (got {self.duration_s})")
        if not (self.time_step_s > 0 and math.isfinite(self.time_step_s)):
            errors.append(f"time step must be > 0 s and finite (got {self.time_step_s})")
        if not self.max_check_s > 0:
            errors.append(f"max check interval must be > 0 s (got {self.max_check_s})")
        if not self.threshold_s > 0:
            errors.append(f"convergence threshold must be > 0 s (got {self.threshold_s})")
        if not (-90.0 <= self.min_elevation_deg <= 90.0):
            errors.append(f"minimum elevation must be in [-90, 90] deg (got {self.min_elevation_deg})")
        if not errors and not math.isfinite(self.duration_s / self.time_step_s):
            errors.append(
                f"duration {self.duration_s} s with time step {self.time_step_s} s gives too many steps"
            )
        elif not errors and self.step_count < 1:
            errors.append(
                f"duration {self.duration_s} s with time step {self.time_step_s} s gives no simulation step"
            )
        if errors:
            raise ConfigError("Invalid scenario: " + "; ".join(errors))

    @property
    def end(self) -> Epoch:
        return self.start + self.duration_s

    @property
    def step_count(self) -> int:
        return int(round(self.duration_s / self.time_step_s))

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> ScenarioConfig:
        """
        Parse a settings mapping (see core.settings.DEFAULT_SETTINGS for keys).

        Raises:
            ConfigError: naming every missing or unparseable key and its value
            OrbitDegenerateError: the orbit is not a bound orbit
        """
        parser = _SettingsParser(settings)

        start_fields = [
            parser.integer("sim_start_year"),
            parser.integer("sim_start_month"),
            parser.integer("sim_start_day"),
            parser.integer("sim_start_hour"),
            parser.integer("sim_start_minute"),
        ]
        start_second = parser.number("sim_start_second")
        duration_days = parser.number("sim_duration_days")
        time_step_s = parser.number("sim_time_step_s")
        max_check_s = parser.number("sim_max_check_s")
        threshold_s = parser.number("sim_threshold_s")
        min_elevation_deg = parser.number("sim_min_elevation_deg")

        if "sat_semi_major_axis_m" in settings:
            sma_m = parser.number("sat_semi_major_axis_m")
            a_km = sma_m / 1000.0 if sma_m is not None else None
        else:
            altitude_m = parser.number("sat_altitude_m")
            a_km = R_EARTH_KM + altitude_m / 1000.0 if altitude_m is not None else None
        eccentricity = parser.number("sat_eccentricity")
        inclination_deg = parser.number("sat_inclination_deg")
        argp_deg = parser.number("sat_argp_deg")
        raan_deg = parser.number("sat_raan_deg")
        mean_anomaly_deg = parser.number("sat_mean_anomaly_deg")

        lat_deg = parser.number("target_lat_deg")
        lon_deg = parser.number("target_lon_deg")
        alt_m = parser.number("target_alt_m")
        station_name = parser.text("station_name", default="Ground Station")

        model = parser.choice("propagator", PROPAGATOR_MODELS)
        lof_name = parser.text("local_orbital_frame", default=LofType.VVLH.value)
        lof_type: Optional[LofType] = None
        if lof_name is not None:
            try:
                lof_type = LofType(lof_name.upper())
            except ValueError:
                parser.errors.append(
                    f"local_orbital_frame: unknown frame {lof_name!r} (expected one of "
                    f"{', '.join(t.value for t in LofType)})"
                )

        output = OutputSettings(
            results_directory=parser.text("results_directory", default="results"),
            satellite_name=parser.text("satellite_name", default="SAT"),
            sun_angles_file=parser.text("exp_file_sun_angles", default="SunAngles.csv"),
            earth_angles_file=parser.text("exp_file_earth_angles", default="EarthAngles.csv"),
            access_times_file=parser.text("exp_file_access_times", default="AccessTimes.csv"),
            encoding=parser.text("exp_text_format", default="utf-8"),
        )

        start: Optional[Epoch] = None
        if None not in start_fields and start_second is not None:
            try:
                start = Epoch.from_calendar(*start_fields, second=start_second)
            except ValueError as exc:
                parser.errors.append(f"sim_start_*: invalid start date ({exc})")

        station: Optional[GroundStation] = None
        if None not in (lat_deg, lon_deg, alt_m):
            try:
                station = GroundStation(name=station_name or "Ground Station", lat_deg=lat_deg, lon_deg=lon_deg, alt_km=alt_m / 1000.0)
            except ValueError as exc:
                parser.errors.append(f"target_*: {exc}")

        parser.raise_if_errors()

        # Orbit validity errors surface as OrbitDegenerateError, not ConfigError
        try:
            elements = OrbitalElements.from_degrees(
                a_km=a_km,
                e=eccentricity,
                inc_deg=inclination_deg,
                raan_deg=raan_deg,
                argp_deg=argp_deg,
                mean_anomaly_deg=mean_anomaly_deg,
                epoch=start,
            )
        except OrbitDegenerateError:
            raise
        except ValueError as exc:
            raise ConfigError(f"Invalid orbit settings: {exc}") from exc

        return cls(
            start=start,
            duration_s=duration_days * 86400.0,
            time_step_s=time_step_s,
            elements=elements,
            station=station,
            min_elevation_deg=min_elevation_deg,
            max_check_s=max_check_s,
            threshold_s=threshold_s,
            propagator_model=model,
            lof_type=lof_type,
            output=output,
        )


class _SettingsParser:
    """Reads typed values and collects every problem before failing."""

    def __init__(self, settings: Mapping[str, Any]):
        self.settings = settings
        self.errors: List[str] = []

    def _raw(self, key: str) -> Any:
        if key not in self.settings:
            self.errors.append(f"Missing key: {key}")
            return None
        return self.settings[key]

    def number(self, key: str) -> Optional[float]:
        raw = self._raw(key)
        if raw is None:
            if key in self.settings:
                self.errors.append(f"{key}: empty value")
            return None
        if isinstance(raw, bool):
            self.errors.append(f"{key}: expected a number, got {raw!r}")
            return None
        try:
            value = float(raw)
        except (TypeError, ValueError):
            self.errors.append(f"{key}: expected a number, got {raw!r}")
            return None
        if not math.isfinite(value):
            self.errors.append(f"{key}: expected a finite number, got {raw!r}")
            return None
        return value

    def integer(self, key: str) -> Optional[int]:
        value = self.number(key)
        if value is None:
            return None
        if value != int(value):
            self.errors.append(f"{key}: expected an integer, got {self.settings[key]!r}")
            return None
        return int(value)

    def text(self, key: str, default: Optional[str] = None) -> Optional[str]:
        raw = self.settings.get(key, default)
        if raw is None:
            self.errors.append(f"Missing key: {key}")
            return None
        return str(raw)

    def choice(self, key: str, options: Mapping[str, Any]) -> Any:
        raw = self._raw(key)
        if raw is None:
            return None
        name = str(raw).strip().lower()
        if name not in options:
            self.errors.append(f"{key}: unknown value {raw!r} (expected one of {', '.join(options)})")
            return None
        return options[name]

    def raise_if_errors(self) -> None:
        if self.errors:
            raise ConfigError("Invalid settings: " + "; ".join(self.errors))
