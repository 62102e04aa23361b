"""
Tests for the CSV result files.
"""
import pytest

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import OutputSinkError
from sat_attitude.output.streams import (
    CsvResultWriter,
    CsvStream,
    access_row,
    earth_angle_row,
    sun_angle_row,
)
from sat_attitude.physics.angles import EarthAngles, SunAngles
from sat_attitude.physics.visibility import AccessWindow
from sat_attitude.simulation.scenario import OutputSettings


T0 = Epoch.from_calendar(2020, 1, 1)


@pytest.fixture
def output(tmp_path):
    return OutputSettings(
        results_directory=str(tmp_path / "results"),
        satellite_name="ERNST",
        sun_angles_file="sun.csv",
        earth_angles_file="earth.csv",
        access_times_file="access.csv",
    )


class TestRows:
    def test_sun_row(self):
        sample = SunAngles(T0, azimuth_deg=123.4567, elevation_deg=-12.3456, subsolar_deg=98.7654)
        assert sun_angle_row(sample) == ["1 Jan 2020 00:00:00.000", "123.457", "-12.346", "098.765"]

    def test_earth_row_zero_padded(self):
        sample = EarthAngles(T0 + 61.25, azimuth_deg=5.0, elevation_deg=90.0)
        assert earth_angle_row(sample) == ["1 Jan 2020 00:01:01.250", "005.000", "090.000"]

    def test_access_row(self):
        window = AccessWindow(3, T0 + 600.0, T0 + 1200.5)
        assert access_row(window) == ["3", "1 Jan 2020 00:10:00.000", "1 Jan 2020 00:20:00.500", "600.500"]

    def test_long_duration_widens(self):
        window = AccessWindow(1, T0, T0 + 12345.678)
        assert access_row(window)[3] == "12345.678"


class TestCsvResultWriter:
    def test_headers_and_rows(self, output):
        with CsvResultWriter(output) as writer:
            writer.on_sun_angles(SunAngles(T0, 123.4567, -12.3456, 98.7654))
            writer.on_earth_angles(EarthAngles(T0, 0.0, 90.0))
            writer.on_access_window(AccessWindow(1, T0 + 600.0, T0 + 1200.5))

        sun, earth, access = (p.read_text(encoding="utf-8") for p in writer.paths)
        assert sun == (
            '"Time (UTCG)","Azimuth (deg)","Elevation (deg)","Subsolar (deg)"\n'
            "1 Jan 2020 00:00:00.000,123.457,-12.346,098.765\n"
        )
        assert earth == (
            '"Time (UTCG)","Azimuth (deg)","Elevation (deg)"\n'
            "1 Jan 2020 00:00:00.000,000.000,090.000\n"
        )
        assert access == (
            '"Access","Start Time (UTCG)","Stop Time (UTCG)","Duration (sec)"\n'
            "1,1 Jan 2020 00:10:00.000,1 Jan 2020 00:20:00.500,600.500\n"
        )

    def test_headers_written_without_records(self, output):
        with CsvResultWriter(output) as writer:
            pass
        assert all(len(p.read_text(encoding="utf-8").splitlines()) == 1 for p in writer.paths)

    def test_creates_results_directory(self, output, tmp_path):
        with CsvResultWriter(output):
            pass
        assert (tmp_path / "results" / "sun.csv").exists()

    def test_close_is_idempotent(self, output):
        writer = CsvResultWriter(output)
        writer.close()
        writer.close()
        assert writer.sun.closed


class TestCsvStream:
    def test_counts_rows(self, tmp_path):
        with CsvStream(tmp_path / "x.csv", ("a", "b")) as stream:
            stream.write_row(["1", "2"])
            stream.write_row(["3", "4"])
        assert stream.rows_written == 2

    def test_write_after_close_raises(self, tmp_path):
        stream = CsvStream(tmp_path / "x.csv", ("a",))
        stream.close()
        with pytest.raises(OutputSinkError, match="already closed"):
            stream.write_row(["1"])

    def test_unwritable_path_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(OutputSinkError, match="Cannot open output file"):
            CsvStream(blocker / "x.csv", ("a",))

    def test_unknown_encoding_raises(self, tmp_path):
        with pytest.raises(OutputSinkError):
            CsvStream(tmp_path / "x.csv", ("a",), encoding="no-such-codec")

    def test_error_is_os_error(self, tmp_path):
        stream = CsvStream(tmp_path / "x.csv", ("a",))
        stream.close()
        with pytest.raises(OSError):
            stream.write_row(["1"])
