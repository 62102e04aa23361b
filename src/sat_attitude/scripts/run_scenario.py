"""
Run one scenario end to end: read the settings file, propagate, and write the
Sun-angle, Earth-angle and access-time files.

    python -m sat_attitude.scripts.run_scenario --config set.yaml --plot
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

from sat_attitude.core.errors import ConfigError, OrbitDegenerateError, OutputSinkError
from sat_attitude.core.settings import load_settings
from sat_attitude.output.streams import CsvResultWriter
from sat_attitude.simulation.engine import Engine
from sat_attitude.simulation.scenario import ScenarioConfig

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Satellite attitude angles and ground-station access")
    parser.add_argument("--config", type=Path, default=Path("set.yaml"), help="Path to YAML settings file")
    parser.add_argument("--plot", action="store_true", help="Also write HTML plots next to the results")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log crossings and other debug output")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    t0 = time.perf_counter()
    try:
        config = ScenarioConfig.from_settings(load_settings(args.config))
        engine = Engine.from_config(config, record_states=args.plot)
    except (ConfigError, OrbitDegenerateError) as exc:
        logger.error("%s", exc)
        return 1

    try:
        with CsvResultWriter(config.output) as writer:
            log = engine.run(sinks=[writer])
    except OutputSinkError as exc:
        logger.error("%s", exc)
        return 1

    if args.plot:
        from sat_attitude.visualization.plotly_viewer import render_angle_timeline, render_orbit_track

        results = Path(config.output.results_directory)
        logger.info("Wrote %s", render_orbit_track(log, str(results / "orbit_track.html")))
        logger.info("Wrote %s", render_angle_timeline(log, str(results / "angle_timeline.html")))

    logger.info(
        "Finished in %.3f s: %d access window(s) for %s",
        time.perf_counter() - t0, len(log.access_windows), config.station.name,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
