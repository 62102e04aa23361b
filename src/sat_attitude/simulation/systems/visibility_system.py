from __future__ import annotations

import logging
from dataclasses import dataclass

from sat_attitude.core.state import SpacecraftState
from sat_attitude.objects.satellite import Satellite
from sat_attitude.physics.visibility import VisibilityDetector
from sat_attitude.simulation.engine import SimulationLog
from sat_attitude.simulation.scenario import ScenarioConfig

logger = logging.getLogger(__name__)


@dataclass
class VisibilitySystem:
    detector: VisibilityDetector
    name: str = "visibility"

    @classmethod
    def for_station(cls, satellite: Satellite, config: ScenarioConfig) -> VisibilitySystem:
        margin = satellite.station_elevation_margin(config.station, config.min_elevation_deg)
        return cls(VisibilityDetector(margin, config.max_check_s, config.threshold_s))

    def on_step(self, state: SpacecraftState, log: SimulationLog) -> None:
        if not self.detector.started:
            self.detector.start(state.epoch)
            return
        for window in self.detector.advance_to(state.epoch):
            log.record_access(window)

    def on_finish(self, log: SimulationLog) -> None:
        begin = self.detector.pending_begin
        if begin is not None:
            log.open_access_begin = begin
            logger.info("Access begun at %s was still open at the end of the run; not reported.", begin)
