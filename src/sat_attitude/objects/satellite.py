from __future__ import annotations

from dataclasses import dataclass

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.propagator import Propagator
from sat_attitude.core.state import SpacecraftState
from sat_attitude.objects.ground_station import GroundStation
from sat_attitude.physics.visibility import MarginFunction


@dataclass(frozen=True)
class Satellite:
    """
    A named spacecraft and the propagator that moves it.
    Holds no per-epoch state: every query propagates from the elements.
    """
    name: str
    propagator: Propagator

    def __post_init__(self):
        if not self.name.strip():
            raise ValueError("Satellite name cannot be empty or whitespace.")

    def state_at(self, epoch: Epoch) -> SpacecraftState:
        return self.propagator.propagate(epoch)

    def station_elevation_margin(self, station: GroundStation, min_elevation_deg: float) -> MarginFunction:
        """g(t) = elevation of this satellite from `station` minus the mask, in degrees."""
        def margin(epoch: Epoch) -> float:
            return station.elevation_deg(self.state_at(epoch).r_eci_km, epoch) - min_elevation_deg
        return margin
