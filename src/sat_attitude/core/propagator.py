"""
Analytic orbit propagators.

Propagation is a pure function of the epoch for fixed elements. The model is
a closed choice between two-body Keplerian motion and a zonal-harmonic mean
element model, selected by passing a model value to `build_propagator`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol, Union

from sat_attitude.core.constants import (
    J2_EARTH,
    J3_EARTH,
    MU_EARTH_KM3_S2,
    R_EARTH_GRAVITY_KM,
    R_EARTH_KM,
)
from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import OrbitDegenerateError
from sat_attitude.core.state import SpacecraftState
from sat_attitude.physics.orbit import (
    OrbitalElements,
    coe_to_rv_eci,
    kepler_to_rv_eci,
    mean_motion_rad_s,
)

logger = logging.getLogger(__name__)


class Propagator(Protocol):
    """Maps an epoch to an inertial spacecraft state."""
    elements: OrbitalElements

    def propagate(self, epoch: Epoch) -> SpacecraftState:
        ...


@dataclass(frozen=True)
class KeplerianModel:
    """Two-body motion, no perturbations."""
    mu_km3_s2: float = MU_EARTH_KM3_S2
    body_radius_km: float = R_EARTH_KM


@dataclass(frozen=True)
class ZonalHarmonicModel:
    """
    Eckstein-Hechler-class zonal model: equatorial radius, gravitational
    parameter and the J2/J3 zonal coefficients.
    """
    equatorial_radius_km: float = R_EARTH_GRAVITY_KM
    mu_km3_s2: float = MU_EARTH_KM3_S2
    j2: float = J2_EARTH
    j3: float = J3_EARTH


PropagatorModel = Union[KeplerianModel, ZonalHarmonicModel]


def _check_above_surface(elements: OrbitalElements, radius_km: float) -> None:
    if elements.a_km <= radius_km:
        raise OrbitDegenerateError(
            f"Semi-major axis {elements.a_km} km is not above the planet radius {radius_km} km."
        )


class KeplerianPropagator:
    def __init__(self, elements: OrbitalElements, model: KeplerianModel = KeplerianModel()):
        _check_above_surface(elements, model.body_radius_km)
        self.elements = elements
        self.model = model

    def propagate(self, epoch: Epoch) -> SpacecraftState:
        r, v = coe_to_rv_eci(self.elements, epoch - self.elements.epoch, self.model.mu_km3_s2)
        return SpacecraftState(epoch=epoch, r_eci_km=r, v_eci_km_s=v)


class ZonalHarmonicPropagator:
    """
    Closed-form mean-element propagation with Earth oblateness.

    Works in circular-orbit parameters (ex, ey, α = ω + M), which stay well
    defined for near-circular orbits:
      - J2 secular rates on the node, the argument of perigee and the mean anomaly
      - J3 long-period motion: the eccentricity vector turns at the perigee rate
        around the frozen eccentricity (0, e_f), e_f = -(J3 / 2 J2)(Re / a) sin i

    The input elements are taken as mean elements. Short-period terms are not
    modelled (a few km in LEO, well below the angular accuracy needed here).
    """

    def __init__(self, elements: OrbitalElements, model: ZonalHarmonicModel = ZonalHarmonicModel()):
        # Altitudes are measured from the WGS-84 ellipsoid, which is slightly larger
        _check_above_surface(elements, max(model.equatorial_radius_km, R_EARTH_KM))
        self.elements = elements
        self.model = model

        a = elements.a_km
        e = elements.e
        n = mean_motion_rad_s(a, model.mu_km3_s2)
        eta = math.sqrt(1.0 - e * e)
        p = a * eta * eta
        k2 = model.j2 * (model.equatorial_radius_km / p) ** 2
        cos_i = math.cos(elements.inc_rad)

        self.raan_dot = -1.5 * n * k2 * cos_i
        self.argp_dot = 0.75 * n * k2 * (5.0 * cos_i * cos_i - 1.0)
        self.mean_anomaly_dot = n * (1.0 + 0.75 * k2 * eta * (3.0 * cos_i * cos_i - 1.0))

        if model.j2 != 0.0:
            self.frozen_e = -(model.j3 / (2.0 * model.j2)) * (model.equatorial_radius_km / a) * math.sin(elements.inc_rad)
        else:
            self.frozen_e = 0.0

        self._ex0 = e * math.cos(elements.argp_rad)
        self._ey0 = e * math.sin(elements.argp_rad)
        self._alpha0 = elements.argp_rad + elements.M0_rad

        logger.debug(
            "Zonal model rates: raan=%.6e argp=%.6e M=%.6e rad/s, frozen e=%.3e",
            self.raan_dot, self.argp_dot, self.mean_anomaly_dot, self.frozen_e,
        )

    def propagate(self, epoch: Epoch) -> SpacecraftState:
        dt = epoch - self.elements.epoch

        # Eccentricity vector rotating about the frozen point
        phi = self.argp_dot * dt
        c = math.cos(phi)
        s = math.sin(phi)
        dy0 = self._ey0 - self.frozen_e
        ex = self._ex0 * c - dy0 * s
        ey = self.frozen_e + self._ex0 * s + dy0 * c

        e = math.hypot(ex, ey)
        argp = math.atan2(ey, ex) if e > 0.0 else 0.0
        alpha = self._alpha0 + (self.argp_dot + self.mean_anomaly_dot) * dt
        raan = self.elements.raan_rad + self.raan_dot * dt

        r, v = kepler_to_rv_eci(
            self.elements.a_km, e, self.elements.inc_rad, raan, argp, alpha - argp, self.model.mu_km3_s2
        )
        return SpacecraftState(epoch=epoch, r_eci_km=r, v_eci_km_s=v)


def build_propagator(elements: OrbitalElements, model: PropagatorModel) -> Propagator:
    """
    Single entry point over the closed set of propagation models.

    Raises:
        OrbitDegenerateError: orbit not above the model's planet radius
        TypeError: unknown model value
    """
    if isinstance(model, KeplerianModel):
        return KeplerianPropagator(elements, model)
    if isinstance(model, ZonalHarmonicModel):
        return ZonalHarmonicPropagator(elements, model)
    raise TypeError(f"Unsupported propagator model: {model!r}")
