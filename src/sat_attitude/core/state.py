from __future__ import annotations

from dataclasses import dataclass

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.frames import Vector3


@dataclass(frozen=True)
class SpacecraftState:
    """
    Inertial position/velocity of the spacecraft at one epoch.
    Built fresh by every propagation call; never updated in place.
    """
    epoch: Epoch
    r_eci_km: Vector3
    v_eci_km_s: Vector3
