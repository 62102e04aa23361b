"""
CSV result files.

Headers are fully quoted, data rows are written bare with fixed-width
numbers, e.g.

    "Time (UTCG)","Azimuth (deg)","Elevation (deg)","Subsolar (deg)"
    1 Jan 2020 00:00:00.000,123.456,-12.345,098.765
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from sat_attitude.core.epoch import format_epoch
from sat_attitude.core.errors import OutputSinkError
from sat_attitude.physics.angles import EarthAngles, SunAngles
from sat_attitude.physics.visibility import AccessWindow
from sat_attitude.simulation.scenario import OutputSettings

logger = logging.getLogger(__name__)

SUN_ANGLES_HEADER = ("Time (UTCG)", "Azimuth (deg)", "Elevation (deg)", "Subsolar (deg)")
EARTH_ANGLES_HEADER = ("Time (UTCG)", "Azimuth (deg)", "Elevation (deg)")
ACCESS_TIMES_HEADER = ("Access", "Start Time (UTCG)", "Stop Time (UTCG)", "Duration (sec)")


def _fixed(value: float) -> str:
    return f"{value:07.3f}"


def sun_angle_row(sample: SunAngles) -> List[str]:
    return [
        format_epoch(sample.epoch),
        _fixed(sample.azimuth_deg),
        _fixed(sample.elevation_deg),
        _fixed(sample.subsolar_deg),
    ]


def earth_angle_row(sample: EarthAngles) -> List[str]:
    return [format_epoch(sample.epoch), _fixed(sample.azimuth_deg), _fixed(sample.elevation_deg)]


def access_row(window: AccessWindow) -> List[str]:
    return [
        str(window.sequence),
        format_epoch(window.start),
        format_epoch(window.stop),
        _fixed(window.duration_s),
    ]


class CsvStream:
    """One output file. Every I/O failure surfaces as OutputSinkError."""

    def __init__(self, path: Path, header: Sequence[str], encoding: str = "utf-8"):
        self.path = Path(path)
        self.rows_written = 0
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("w", newline="", encoding=encoding)
            csv.writer(self._file, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(header)
        except (OSError, LookupError) as exc:
            raise OutputSinkError(f"Cannot open output file <{self.path}>: {exc}") from exc
        self._writer = csv.writer(self._file, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

    @property
    def closed(self) -> bool:
        return self._file.closed

    def write_row(self, fields: Sequence[str]) -> None:
        if self._file.closed:
            raise OutputSinkError(f"Output file <{self.path}> is already closed.")
        try:
            self._writer.writerow(fields)
        except OSError as exc:
            raise OutputSinkError(f"Cannot write to <{self.path}>: {exc}") from exc
        self.rows_written += 1

    def close(self) -> None:
        if self._file.closed:
            return
        try:
            self._file.close()
        except OSError as exc:
            raise OutputSinkError(f"Cannot close <{self.path}>: {exc}") from exc

    def __enter__(self) -> CsvStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class CsvResultWriter:
    """
    Writes the Sun-angle, Earth-angle and access-time files of one run.
    Usable as a sink for Engine.run and as a context manager.
    """

    def __init__(self, output: OutputSettings):
        self.output = output
        streams: List[CsvStream] = []
        try:
            self.sun = CsvStream(output.path_for(output.sun_angles_file), SUN_ANGLES_HEADER, output.encoding)
            streams.append(self.sun)
            self.earth = CsvStream(output.path_for(output.earth_angles_file), EARTH_ANGLES_HEADER, output.encoding)
            streams.append(self.earth)
            self.access = CsvStream(output.path_for(output.access_times_file), ACCESS_TIMES_HEADER, output.encoding)
            streams.append(self.access)
        except OutputSinkError:
            for stream in streams:
                stream.close()
            raise
        logger.info("Writing results to <%s>", output.results_directory)

    @property
    def paths(self) -> List[Path]:
        return [self.sun.path, self.earth.path, self.access.path]

    def on_sun_angles(self, sample: SunAngles) -> None:
        self.sun.write_row(sun_angle_row(sample))

    def on_earth_angles(self, sample: EarthAngles) -> None:
        self.earth.write_row(earth_angle_row(sample))

    def on_access_window(self, window: AccessWindow) -> None:
        self.access.write_row(access_row(window))

    def close(self) -> None:
        first_error: Optional[OutputSinkError] = None
        for stream in (self.sun, self.earth, self.access):
            try:
                stream.close()
            except OutputSinkError as exc:
                logger.error("%s", exc)
                first_error = first_error or exc
        if first_error is not None:
            raise first_error

    def __enter__(self) -> CsvResultWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
