from __future__ import annotations

from dataclasses import dataclass, field

from sat_attitude.core.frames import LocalOrbitalFrame, LofType
from sat_attitude.core.state import SpacecraftState
from sat_attitude.physics.angles import AngleEngine
from sat_attitude.simulation.engine import SimulationLog


@dataclass
class AngleSystem:
    """Sun and Earth angles in the satellite's local orbital frame, once per tick."""
    lof_type: LofType = LofType.VVLH
    angles: AngleEngine = field(default_factory=AngleEngine)
    name: str = "angles"

    def on_step(self, state: SpacecraftState, log: SimulationLog) -> None:
        # The frame is tied to this state's epoch and is rebuilt every tick
        frame = LocalOrbitalFrame(state, self.lof_type)
        log.record_sun_angles(self.angles.sun_angles(state, frame))
        log.record_earth_angles(self.angles.earth_angles(state, frame))
