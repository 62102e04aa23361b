"""
Sun and Earth orientation angles as seen from the satellite.

Azimuth is measured in the local x-y plane from +X towards +Y, elevation from
that plane towards +Z. In the default VVLH frame +Z points to nadir, so the
Earth centre sits at elevation ~90 deg.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.ephemeris import Body, EphemerisProvider
from sat_attitude.core.errors import DegenerateGeometryError
from sat_attitude.core.frames import Frame, PLUS_I, Vector3, cross, dot, norm
from sat_attitude.core.state import SpacecraftState

logger = logging.getLogger(__name__)

# Above this |cos|, acos loses precision and the cross-product form is used
_NEAR_PARALLEL_COS = 0.9999

# Reported when the body lies on the local vertical axis
DEGENERATE_AZIMUTH_DEG = 0.0
DEGENERATE_ELEVATION_DEG = 90.0


@dataclass(frozen=True)
class SunAngles:
    epoch: Epoch
    azimuth_deg: float
    elevation_deg: float
    subsolar_deg: float


@dataclass(frozen=True)
class EarthAngles:
    epoch: Epoch
    azimuth_deg: float
    elevation_deg: float


def vector_angle_rad(a: Vector3, b: Vector3) -> float:
    """
    Angle between two vectors in [0, π].

    Raises:
        DegenerateGeometryError: either vector has zero length
    """
    norm_product = norm(a) * norm(b)
    if norm_product == 0.0:
        raise DegenerateGeometryError("Angle is undefined for a zero-length vector.")

    cos_angle = dot(a, b) / norm_product
    if abs(cos_angle) > _NEAR_PARALLEL_COS:
        sin_angle = min(1.0, norm(cross(a, b)) / norm_product)
        if cos_angle >= 0.0:
            return math.asin(sin_angle)
        return math.pi - math.asin(sin_angle)
    return math.acos(cos_angle)


def azimuth_elevation_deg(v_local: Vector3) -> Tuple[float, float]:
    """
    Azimuth in [0, 360) and elevation in [-90, 90] of a vector given in a local frame.

    With no horizontal component (x == y == 0) there is no azimuth reference:
    azimuth is 0 and elevation 90, then signed by z like every other vector.
    """
    x, y, z = v_local
    if x == 0.0 and y == 0.0:
        azimuth = DEGENERATE_AZIMUTH_DEG
        elevation = DEGENERATE_ELEVATION_DEG
    else:
        horizontal = (x, y, 0.0)
        azimuth = math.degrees(vector_angle_rad(PLUS_I, horizontal))
        elevation = math.degrees(vector_angle_rad(v_local, horizontal))

    if y < 0:
        azimuth = 360.0 - azimuth
    if z < 0:
        elevation = -elevation

    return azimuth % 360.0, elevation


class AngleEngine:
    """
    Derives the per-step angles from ephemeris positions.

    Geometric degeneracies are resolved here with the documented fallback
    values and never reach the caller.
    """

    def __init__(self, ephemeris: Optional[EphemerisProvider] = None):
        self.ephemeris = ephemeris if ephemeris is not None else EphemerisProvider()

    def body_azimuth_elevation_deg(self, body: Body, epoch: Epoch, frame: Frame) -> Tuple[float, float]:
        try:
            v = self.ephemeris.position(body, epoch, frame)
        except DegenerateGeometryError as exc:
            logger.debug("Degenerate %s direction at %s: %s", body.value, epoch, exc)
            return DEGENERATE_AZIMUTH_DEG, DEGENERATE_ELEVATION_DEG
        return azimuth_elevation_deg(v)

    def subsolar_angle_deg(self, state: SpacecraftState) -> float:
        """Angle between Earth->Sun and Earth->satellite, in [0, 180]."""
        earth_to_sun = self.ephemeris.position_eci_km(Body.SUN, state.epoch)
        try:
            return math.degrees(vector_angle_rad(earth_to_sun, state.r_eci_km))
        except DegenerateGeometryError as exc:
            logger.debug("Degenerate subsolar geometry at %s: %s", state.epoch, exc)
            return 0.0

    def sun_angles(self, state: SpacecraftState, frame: Frame) -> SunAngles:
        azimuth, elevation = self.body_azimuth_elevation_deg(Body.SUN, state.epoch, frame)
        return SunAngles(
            epoch=state.epoch,
            azimuth_deg=azimuth,
            elevation_deg=elevation,
            subsolar_deg=self.subsolar_angle_deg(state),
        )

    def earth_angles(self, state: SpacecraftState, frame: Frame) -> EarthAngles:
        azimuth, elevation = self.body_azimuth_elevation_deg(Body.EARTH, state.epoch, frame)
        return EarthAngles(epoch=state.epoch, azimuth_deg=azimuth, elevation_deg=elevation)
