from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Tuple

from sat_attitude.core.constants import FLATTENING_EARTH, R_EARTH_KM
from sat_attitude.core.errors import DegenerateGeometryError

if TYPE_CHECKING:
    from sat_attitude.core.epoch import Epoch
    from sat_attitude.core.state import SpacecraftState

Vector3 = Tuple[float, float, float]
# Row-major 3x3 rotation matrix
Matrix3 = Tuple[Vector3, Vector3, Vector3]

ZERO: Vector3 = (0.0, 0.0, 0.0)
PLUS_I: Vector3 = (1.0, 0.0, 0.0)
IDENTITY: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


def rot3(angle_rad: float, v: Vector3) -> Vector3:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y, z = v
    return (c * x - s * y, s * x + c * y, z)


def rot1(angle_rad: float, v: Vector3) -> Vector3:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y, z = v
    return (x, c * y - s * z, s * y + c * z)


def dot(a: Vector3, b: Vector3) -> float:
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]


def add(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]+b[0], a[1]+b[1], a[2]+b[2])


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]-b[0], a[1]-b[1], a[2]-b[2])


def scale(a: Vector3, k: float) -> Vector3:
    return (a[0]*k, a[1]*k, a[2]*k)


def cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1]*b[2] - a[2]*b[1],
        a[2]*b[0] - a[0]*b[2],
        a[0]*b[1] - a[1]*b[0],
    )


def norm(a: Vector3) -> float:
    return math.sqrt(dot(a, a))


def unit(a: Vector3) -> Vector3:
    n = norm(a)
    if n == 0.0:
        raise DegenerateGeometryError("Cannot normalize a zero vector.")
    return (a[0]/n, a[1]/n, a[2]/n)


def mat_vec(m: Matrix3, v: Vector3) -> Vector3:
    return (dot(m[0], v), dot(m[1], v), dot(m[2], v))


def mat_t_vec(m: Matrix3, v: Vector3) -> Vector3:
    """Multiply by the transpose (the inverse, for a rotation)."""
    return add(add(scale(m[0], v[0]), scale(m[1], v[1])), scale(m[2], v[2]))


def mat_mul(a: Matrix3, b: Matrix3) -> Matrix3:
    b_cols = ((b[0][0], b[1][0], b[2][0]), (b[0][1], b[1][1], b[2][1]), (b[0][2], b[1][2], b[2][2]))
    return tuple(
        (dot(row, b_cols[0]), dot(row, b_cols[1]), dot(row, b_cols[2])) for row in a
    )  # type: ignore[return-value]


def gmst_rad(epoch: Epoch) -> float:
    """
    Greenwich mean sidereal time (IAU 1982 expression), UT1 taken equal to UTC.

    The angle is applied directly to the J2000 axes, so precession and
    nutation are ignored. In 2020 this shifts a station by about 0.28 deg of
    longitude, well inside what access planning needs.
    """
    d = epoch.seconds_since_j2000 / 86400.0
    t = d / 36525.0
    gmst_deg = 280.46061837 + 360.98564736629 * d + 0.000387933 * t * t - t * t * t / 38710000.0
    return math.radians(gmst_deg % 360.0)


def ecef_to_eci_km(r_ecef: Vector3, epoch: Epoch) -> Vector3:
    """ECI = R3(+GMST) * ECEF"""
    return rot3(gmst_rad(epoch), r_ecef)


def eci_to_ecef_km(r_eci: Vector3, epoch: Epoch) -> Vector3:
    """ECEF = R3(-GMST) * ECI"""
    return rot3(-gmst_rad(epoch), r_eci)


def geodetic_to_ecef_km(lat_rad: float, lon_rad: float, alt_km: float) -> Vector3:
    """
    Geodetic latitude/longitude/altitude on the WGS-84 ellipsoid -> ECEF (km).
    """
    e2 = FLATTENING_EARTH * (2.0 - FLATTENING_EARTH)
    slat = math.sin(lat_rad)
    clat = math.cos(lat_rad)
    n = R_EARTH_KM / math.sqrt(1.0 - e2 * slat * slat)

    x = (n + alt_km) * clat * math.cos(lon_rad)
    y = (n + alt_km) * clat * math.sin(lon_rad)
    z = (n * (1.0 - e2) + alt_km) * slat
    return (x, y, z)


def perifocal_to_eci(r_pqw: Vector3, v_pqw: Vector3, raan_rad: float, inc_rad: float, argp_rad: float) -> Tuple[Vector3, Vector3]:
    """
    Convert position and velocity from perifocal (PQW) frame to ECI frame.

    ECI = R3(raan) * R1(inc) * R3(argp) * PQW, with rot1/rot3 rotating the
    vector counter-clockwise; the argument of periapsis is applied first.
    """
    r_eci = rot3(raan_rad, rot1(inc_rad, rot3(argp_rad, r_pqw)))
    v_eci = rot3(raan_rad, rot1(inc_rad, rot3(argp_rad, v_pqw)))
    return r_eci, v_eci


class Frame:
    """
    A named coordinate system defined by its transform from the inertial frame:
        p_local = R(t) * (r_eci - origin(t))
    """
    name: str = "frame"

    def rotation_from_inertial(self, epoch: Epoch) -> Matrix3:
        raise NotImplementedError

    def origin_eci_km(self, epoch: Epoch) -> Vector3:
        return ZERO

    def position_from_inertial(self, r_eci_km: Vector3, epoch: Epoch) -> Vector3:
        return mat_vec(self.rotation_from_inertial(epoch), sub(r_eci_km, self.origin_eci_km(epoch)))

    def position_to_inertial(self, p_local_km: Vector3, epoch: Epoch) -> Vector3:
        return add(mat_t_vec(self.rotation_from_inertial(epoch), p_local_km), self.origin_eci_km(epoch))


@dataclass(frozen=True)
class InertialFrame(Frame):
    """Earth-centred inertial frame (J2000-like axes)."""
    name: str = "ECI"

    def rotation_from_inertial(self, epoch: Epoch) -> Matrix3:
        return IDENTITY


@dataclass(frozen=True)
class EarthFixedFrame(Frame):
    """Earth-centred frame rotating with the planet at GMST."""
    name: str = "ECEF"

    def rotation_from_inertial(self, epoch: Epoch) -> Matrix3:
        theta = gmst_rad(epoch)
        c = math.cos(theta)
        s = math.sin(theta)
        return ((c, s, 0.0), (-s, c, 0.0), (0.0, 0.0, 1.0))


class LofType(Enum):
    """
    Local orbital frame conventions.

    VVLH: Z = -r (nadir), Y = -h (negative orbit normal), X = Y x Z (along-track)
    LVLH: X = r (radial), Z = h (orbit normal), Y = Z x X
    TNW:  X = v (tangential), Z = h (orbit normal), Y = Z x X
    """
    VVLH = "VVLH"
    LVLH = "LVLH"
    TNW = "TNW"


def lof_axes(r_eci_km: Vector3, v_eci_km_s: Vector3, lof_type: LofType) -> Matrix3:
    """Unit axes of the local orbital frame, expressed in ECI, as matrix rows."""
    r_hat = unit(r_eci_km)
    h_hat = unit(cross(r_eci_km, v_eci_km_s))

    if lof_type is LofType.VVLH:
        z = scale(r_hat, -1.0)
        y = scale(h_hat, -1.0)
        x = cross(y, z)
    elif lof_type is LofType.LVLH:
        x = r_hat
        z = h_hat
        y = cross(z, x)
    elif lof_type is LofType.TNW:
        x = unit(v_eci_km_s)
        z = h_hat
        y = cross(z, x)
    else:
        raise ValueError(f"Unknown local orbital frame type: {lof_type}")
    return (x, y, z)


@dataclass(frozen=True)
class LocalOrbitalFrame(Frame):
    """
    Frame centred on the spacecraft, axes from its instantaneous position and
    velocity. Only valid at the epoch of the state it was built from.
    """
    state: SpacecraftState
    lof_type: LofType = LofType.VVLH
    name: str = "Satellite Frame"

    def _check_epoch(self, epoch: Epoch) -> None:
        if epoch != self.state.epoch:
            raise ValueError(
                f"Local orbital frame built at {self.state.epoch} cannot be used at {epoch}."
            )

    def rotation_from_inertial(self, epoch: Epoch) -> Matrix3:
        self._check_epoch(epoch)
        return lof_axes(self.state.r_eci_km, self.state.v_eci_km_s, self.lof_type)

    def origin_eci_km(self, epoch: Epoch) -> Vector3:
        self._check_epoch(epoch)
        return self.state.r_eci_km


@dataclass(frozen=True)
class TopocentricFrame(Frame):
    """
    East-North-Up frame at a geodetic point on the WGS-84 ellipsoid.
    """
    lat_rad: float
    lon_rad: float
    alt_km: float = 0.0
    name: str = "Ground Station"

    def origin_ecef_km(self) -> Vector3:
        return geodetic_to_ecef_km(self.lat_rad, self.lon_rad, self.alt_km)

    def enu_from_ecef(self) -> Matrix3:
        slat = math.sin(self.lat_rad)
        clat = math.cos(self.lat_rad)
        slon = math.sin(self.lon_rad)
        clon = math.cos(self.lon_rad)
        east = (-slon, clon, 0.0)
        north = (-slat * clon, -slat * slon, clat)
        up = (clat * clon, clat * slon, slat)
        return (east, north, up)

    def rotation_from_inertial(self, epoch: Epoch) -> Matrix3:
        return mat_mul(self.enu_from_ecef(), EarthFixedFrame().rotation_from_inertial(epoch))

    def origin_eci_km(self, epoch: Epoch) -> Vector3:
        return ecef_to_eci_km(self.origin_ecef_km(), epoch)
