from __future__ import annotations

from dataclasses import dataclass

from sat_attitude.core.state import SpacecraftState
from sat_attitude.simulation.engine import SimulationLog


@dataclass
class StateRecorderSystem:
    name: str = "state_recorder"

    def on_step(self, state: SpacecraftState, log: SimulationLog) -> None:
        log.record_position(state.epoch, state.r_eci_km)
