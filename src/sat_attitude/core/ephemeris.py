"""
Low-precision ephemerides for the bodies the attitude angles refer to.

The Sun follows the Astronomical Almanac low-precision formulae (about 0.01 deg
over 1950-2050), rotated from ecliptic to equatorial axes with the mean
obliquity. The Earth sits at the origin of the inertial frame.
"""

from __future__ import annotations

import math
from enum import Enum

from sat_attitude.core.constants import AU_KM, JD_J2000
from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import DegenerateGeometryError
from sat_attitude.core.frames import Frame, Vector3, ZERO, norm


class Body(Enum):
    SUN = "sun"
    EARTH = "earth"


def sun_position_eci_km(epoch: Epoch) -> Vector3:
    """
    Geocentric Sun position in the inertial frame (km).

    Args:
        epoch: Evaluation epoch

    Returns:
        Sun position vector in ECI (km)
    """
    # Days since J2000.0
    d = epoch.julian_day - JD_J2000

    # Mean longitude and mean anomaly (deg)
    L = (280.460 + 0.9856474 * d) % 360.0
    g = math.radians((357.528 + 0.9856003 * d) % 360.0)

    # Ecliptic longitude, obliquity, distance
    lambda_sun = math.radians(L + 1.915 * math.sin(g) + 0.020 * math.sin(2.0 * g))
    eps = math.radians(23.439 - 0.0000004 * d)
    r_km = (1.00014 - 0.01671 * math.cos(g) - 0.00014 * math.cos(2.0 * g)) * AU_KM

    return (
        r_km * math.cos(lambda_sun),
        r_km * math.cos(eps) * math.sin(lambda_sun),
        r_km * math.sin(eps) * math.sin(lambda_sun),
    )


class EphemerisProvider:
    """Body positions at an epoch, expressed in any frame."""

    def position_eci_km(self, body: Body, epoch: Epoch) -> Vector3:
        if body is Body.SUN:
            return sun_position_eci_km(epoch)
        if body is Body.EARTH:
            return ZERO
        raise ValueError(f"Unsupported body: {body}")

    def position(self, body: Body, epoch: Epoch, frame: Frame) -> Vector3:
        """
        Position of `body` relative to the origin of `frame`, in `frame` axes.

        Raises:
            DegenerateGeometryError: the body coincides with the frame origin
        """
        r = frame.position_from_inertial(self.position_eci_km(body, epoch), epoch)
        if norm(r) == 0.0:
            raise DegenerateGeometryError(
                f"{body.value} coincides with the origin of frame '{frame.name}' at {epoch}."
            )
        return r
