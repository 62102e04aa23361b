from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.frames import TopocentricFrame, Vector3, norm


@dataclass(frozen=True)
class GroundStation:
    name: str
    lat_deg: float
    lon_deg: float
    alt_km: float = 0.0

    def __post_init__(self):
        if not (-90.0 <= self.lat_deg <= 90.0):
            raise ValueError(f"Latitude must be in range [-90, 90] degrees. Got: {self.lat_deg}")
        if not (-180.0 <= self.lon_deg <= 180.0):
            raise ValueError(f"Longitude must be in range [-180, 180] degrees. Got: {self.lon_deg}")
        if not math.isfinite(self.alt_km) or self.alt_km < -0.5:
            raise ValueError(f"Altitude must be finite and above -0.5 km. Got: {self.alt_km}")
        if not self.name.strip():
            raise ValueError("Station name cannot be empty or whitespace.")

    @property
    def frame(self) -> TopocentricFrame:
        return TopocentricFrame(
            lat_rad=math.radians(self.lat_deg),
            lon_rad=math.radians(self.lon_deg),
            alt_km=self.alt_km,
            name=self.name,
        )

    def position_eci_km(self, epoch: Epoch) -> Vector3:
        return self.frame.origin_eci_km(epoch)

    def look_angles(self, r_sat_eci_km: Vector3, epoch: Epoch) -> Tuple[float, float, float]:
        """
        Azimuth (deg, from North through East, [0, 360)), elevation (deg) and
        range (km) of a satellite seen from the station.
        """
        east, north, up = self.frame.position_from_inertial(r_sat_eci_km, epoch)
        rng = norm((east, north, up))
        if rng == 0.0:
            return 0.0, 90.0, 0.0
        elevation = math.degrees(math.asin(max(-1.0, min(1.0, up / rng))))
        azimuth = math.degrees(math.atan2(east, north)) % 360.0
        return azimuth, elevation, rng

    def elevation_deg(self, r_sat_eci_km: Vector3, epoch: Epoch) -> float:
        return self.look_angles(r_sat_eci_km, epoch)[1]
