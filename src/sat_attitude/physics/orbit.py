from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from sat_attitude.core.constants import MU_EARTH_KM3_S2
from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import OrbitDegenerateError
from sat_attitude.core.frames import perifocal_to_eci, Vector3


@dataclass(frozen=True)
class OrbitalElements:
    """
    Classical Orbital Elements (COEs) of an elliptic orbit at a reference epoch.

    Units:
        a_km: semi-major axis in km
        e: eccentricity (0<=e<1)
        inc_rad: inclination in radians
        raan_rad: right ascension of ascending node in radians
        argp_rad: argument of periapsis in radians
        M0_rad: mean anomaly at `epoch` in radians
    """
    a_km: float
    e: float
    inc_rad: float
    raan_rad: float
    argp_rad: float
    M0_rad: float
    epoch: Epoch

    def __post_init__(self):
        if not (math.isfinite(self.a_km) and self.a_km > 0):
            raise OrbitDegenerateError(f"Semi-major axis must be positive. Got: {self.a_km} km")
        if not (0.0 <= self.e < 1.0):
            raise OrbitDegenerateError(f"Only elliptic orbits are supported (0 <= e < 1). Got: {self.e}")
        if not (0.0 <= self.inc_rad <= math.pi):
            raise ValueError(f"Inclination must be in range [0, π] radians. Got: {self.inc_rad}")
        if not math.isfinite(self.raan_rad):
            raise ValueError(f"RAAN must be finite. Got: {self.raan_rad}")
        if not math.isfinite(self.argp_rad):
            raise ValueError(f"Argument of periapsis must be finite. Got: {self.argp_rad}")
        if not math.isfinite(self.M0_rad):
            raise ValueError(f"Mean anomaly must be finite. Got: {self.M0_rad}")

    @classmethod
    def from_degrees(
        cls,
        a_km: float,
        e: float,
        inc_deg: float,
        raan_deg: float,
        argp_deg: float,
        mean_anomaly_deg: float,
        epoch: Epoch,
    ) -> OrbitalElements:
        return cls(
            a_km=a_km,
            e=e,
            inc_rad=math.radians(inc_deg),
            raan_rad=math.radians(raan_deg),
            argp_rad=math.radians(argp_deg),
            M0_rad=math.radians(mean_anomaly_deg),
            epoch=epoch,
        )


def wrap_to_2pi(angle_rad: float) -> float:
    """Wrap angle to [0, 2π)."""
    return angle_rad % (2.0 * math.pi)


def mean_motion_rad_s(a_km: float, mu_km3_s2: float = MU_EARTH_KM3_S2) -> float:
    """n = sqrt(mu / a^3)."""
    return math.sqrt(mu_km3_s2 / (a_km ** 3))


def orbital_period_s(a_km: float, mu_km3_s2: float = MU_EARTH_KM3_S2) -> float:
    return 2.0 * math.pi / mean_motion_rad_s(a_km, mu_km3_s2)


def solve_keplers_equation(M_rad: float, e: float, tol: float = 1e-12, max_iter: int = 50) -> float:
    """
    Solve M = E - e sin(E) for the eccentric anomaly E (rad) by Newton-Raphson.

    Raises:
        OrbitDegenerateError: e outside [0, 1)
        RuntimeError: no convergence within max_iter
    """
    if not (0.0 <= e < 1.0):
        raise OrbitDegenerateError(f"Elliptic Kepler solver requires 0 <= e < 1. Got: {e}")

    M = wrap_to_2pi(M_rad)
    if e == 0.0:
        return M

    # Starting at pi avoids slow convergence near M ~ 0 for high e
    E = M if e < 0.8 else math.pi

    for _ in range(max_iter):
        dE = -(E - e * math.sin(E) - M) / (1.0 - e * math.cos(E))
        E += dE
        if abs(dE) < tol:
            return wrap_to_2pi(E)

    raise RuntimeError(f"Kepler solver did not converge within {max_iter} iterations (M={M}, e={e}).")


def kepler_to_rv_eci(
    a_km: float,
    e: float,
    inc_rad: float,
    raan_rad: float,
    argp_rad: float,
    M_rad: float,
    mu_km3_s2: float = MU_EARTH_KM3_S2,
) -> Tuple[Vector3, Vector3]:
    """
    Position and velocity (km, km/s) in ECI for a given set of osculating
    elements, the anomaly given as mean anomaly.
    """
    E = solve_keplers_equation(M_rad, e)

    # True anomaly ν from eccentric anomaly E
    sin_v = (math.sqrt(1.0 - e * e) * math.sin(E)) / (1.0 - e * math.cos(E))
    cos_v = (math.cos(E) - e) / (1.0 - e * math.cos(E))
    nu = math.atan2(sin_v, cos_v)

    r_km = a_km * (1.0 - e * math.cos(E))
    r_pqw: Vector3 = (r_km * math.cos(nu), r_km * math.sin(nu), 0.0)

    # h = sqrt(mu p), p = a(1-e^2)
    h = math.sqrt(mu_km3_s2 * a_km * (1.0 - e * e))
    v_pqw: Vector3 = (
        -mu_km3_s2 / h * math.sin(nu),
        mu_km3_s2 / h * (e + math.cos(nu)),
        0.0,
    )

    return perifocal_to_eci(r_pqw, v_pqw, raan_rad, inc_rad, argp_rad)


def coe_to_rv_eci(elements: OrbitalElements, dt_s: float, mu_km3_s2: float = MU_EARTH_KM3_S2) -> Tuple[Vector3, Vector3]:
    """
    Two-body Keplerian state `dt_s` seconds after the elements' epoch.

    Returns:
        r_eci (km), v_eci (km/s)
    """
    M = elements.M0_rad + mean_motion_rad_s(elements.a_km, mu_km3_s2) * dt_s
    return kepler_to_rv_eci(
        elements.a_km, elements.e, elements.inc_rad, elements.raan_rad, elements.argp_rad, M, mu_km3_s2
    )
