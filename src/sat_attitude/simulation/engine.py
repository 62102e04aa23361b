from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import OutputSinkError
from sat_attitude.core.frames import Vector3
from sat_attitude.core.propagator import build_propagator
from sat_attitude.core.state import SpacecraftState
from sat_attitude.objects.satellite import Satellite
from sat_attitude.physics.angles import EarthAngles, SunAngles
from sat_attitude.physics.visibility import AccessWindow
from sat_attitude.simulation.scenario import ScenarioConfig

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    """External consumer of the three result streams."""

    def on_sun_angles(self, sample: SunAngles) -> None:
        ...

    def on_earth_angles(self, sample: EarthAngles) -> None:
        ...

    def on_access_window(self, window: AccessWindow) -> None:
        ...


class System(Protocol):
    """
    Plugin interface for simulation systems.
    Each system runs per tick on the freshly propagated state and can write to the log.
    """
    name: str

    def on_step(self, state: SpacecraftState, log: "SimulationLog") -> None:
        ...


@dataclass
class SimulationLog:
    """
    Stores outputs from a simulation run and forwards each record to the sinks.
    A failing sink is reported and counted; the run goes on.
    """
    sun_angles: List[SunAngles] = field(default_factory=list)
    earth_angles: List[EarthAngles] = field(default_factory=list)
    access_windows: List[AccessWindow] = field(default_factory=list)

    # Filled only when a StateRecorderSystem runs: list of (epoch, r_eci)
    sat_positions_eci_km: List[Tuple[Epoch, Vector3]] = field(default_factory=list)

    # Begin of an access still open when the run ended
    open_access_begin: Optional[Epoch] = None

    sinks: List[ResultSink] = field(default_factory=list)
    sink_errors: int = 0

    def _emit(self, method: str, record) -> None:
        for sink in self.sinks:
            try:
                getattr(sink, method)(record)
            except OutputSinkError as exc:
                self.sink_errors += 1
                logger.error("Output sink %s failed: %s", type(sink).__name__, exc)

    def record_position(self, epoch: Epoch, r_eci: Vector3) -> None:
        self.sat_positions_eci_km.append((epoch, r_eci))

    def record_sun_angles(self, sample: SunAngles) -> None:
        self.sun_angles.append(sample)
        self._emit("on_sun_angles", sample)

    def record_earth_angles(self, sample: EarthAngles) -> None:
        self.earth_angles.append(sample)
        self._emit("on_earth_angles", sample)

    def record_access(self, window: AccessWindow) -> None:
        self.access_windows.append(window)
        self._emit("on_access_window", window)


@dataclass
class Engine:
    """
    Fixed-step simulation driver.
    Deterministic replay: given the same config => same output.
    """
    config: ScenarioConfig
    satellite: Satellite
    systems: List[System] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: ScenarioConfig, record_states: bool = False) -> Engine:
        """
        Build the satellite and the default systems for a scenario.

        Raises:
            OrbitDegenerateError: the orbit is invalid for the selected model
        """
        # Local imports: the systems import SimulationLog from this module
        from sat_attitude.simulation.systems.angle_system import AngleSystem
        from sat_attitude.simulation.systems.state_recorder import StateRecorderSystem
        from sat_attitude.simulation.systems.visibility_system import VisibilitySystem

        satellite = Satellite(
            name=config.output.satellite_name,
            propagator=build_propagator(config.elements, config.propagator_model),
        )

        systems: List[System] = []
        if record_states:
            systems.append(StateRecorderSystem())
        systems.append(AngleSystem(lof_type=config.lof_type))
        systems.append(VisibilitySystem.for_station(satellite, config))
        return cls(config=config, satellite=satellite, systems=systems)

    def epochs(self) -> List[Epoch]:
        """t_i = start + i * step for i in [0, N), N = round(duration / step)."""
        start = self.config.start
        step = self.config.time_step_s
        return [start + i * step for i in range(self.config.step_count)]

    def run(self, sinks: Sequence[ResultSink] = ()) -> SimulationLog:
        log = SimulationLog(sinks=list(sinks))
        epochs = self.epochs()
        n = len(epochs)
        progress_every = max(1, round(n / 10))

        logger.info(
            "Propagating %s from %s to %s, step %.3f s (%d steps)",
            self.satellite.name, self.config.start, self.config.end, self.config.time_step_s, n,
        )

        # Tick loop
        for i, t in enumerate(epochs):
            if i % progress_every == 0:
                logger.info("Progress: %3.0f%%", 100.0 * i / n)

            state = self.satellite.state_at(t)
            for sys in self.systems:
                sys.on_step(state, log)

        for sys in self.systems:
            finish = getattr(sys, "on_finish", None)
            if finish is not None:
                finish(log)

        logger.info(
            "Simulation done: %d sun samples, %d earth samples, %d access windows",
            len(log.sun_angles), len(log.earth_angles), len(log.access_windows),
        )
        if log.sink_errors:
            logger.error("%d record(s) could not be written to the output sinks", log.sink_errors)
        return log
