"""
Tests for building a scenario from a settings mapping.
"""
import math
import pytest

from sat_attitude.core.constants import R_EARTH_KM
from sat_attitude.core.epoch import Epoch
from sat_attitude.core.errors import ConfigError, OrbitDegenerateError
from sat_attitude.core.frames import LofType
from sat_attitude.core.propagator import KeplerianModel, ZonalHarmonicModel
from sat_attitude.core.settings import DEFAULT_SETTINGS
from sat_attitude.simulation.scenario import ScenarioConfig


def settings_with(**overrides):
    settings = dict(DEFAULT_SETTINGS)
    settings.update(overrides)
    return settings


class TestFromSettings:
    def test_defaults(self):
        config = ScenarioConfig.from_settings(DEFAULT_SETTINGS)

        assert config.start == Epoch.from_calendar(2020, 1, 1)
        assert config.duration_s == 86400.0
        assert config.time_step_s == 60.0
        assert config.step_count == 1440
        assert config.end == config.start + 86400.0
        assert config.max_check_s == 60.0
        assert config.threshold_s == 0.001
        assert config.min_elevation_deg == 0.0
        assert config.propagator_model == ZonalHarmonicModel()
        assert config.lof_type is LofType.VVLH

    def test_orbit_from_altitude(self):
        el = ScenarioConfig.from_settings(DEFAULT_SETTINGS).elements
        assert el.a_km == pytest.approx(R_EARTH_KM + 700.0)
        assert el.e == 0.0
        assert el.inc_rad == pytest.approx(math.radians(98.1929))
        assert el.raan_rad == pytest.approx(math.radians(10.5834))
        assert el.epoch == Epoch.from_calendar(2020, 1, 1)

    def test_semi_major_axis_overrides_altitude(self):
        config = ScenarioConfig.from_settings(settings_with(sat_semi_major_axis_m=7000000.0))
        assert config.elements.a_km == pytest.approx(7000.0)

    def test_station_altitude_in_km(self):
        station = ScenarioConfig.from_settings(DEFAULT_SETTINGS).station
        assert station.lat_deg == 48.001081
        assert station.lon_deg == 7.846619
        assert station.alt_km == pytest.approx(0.32)

    def test_output_names(self):
        output = ScenarioConfig.from_settings(DEFAULT_SETTINGS).output
        assert output.satellite_name == "ERNST"
        assert output.sun_angles_file == "ERNST_i98_a700_SunAngles.csv"
        assert output.earth_angles_file == "ERNST_i98_a700_EarthAngles.csv"
        assert output.access_times_file == "ERNST_i98_a700_AccessTimes.csv"
        assert str(output.path_for(output.sun_angles_file)).endswith("ERNST_i98_a700_SunAngles.csv")

    def test_keplerian_model(self):
        config = ScenarioConfig.from_settings(settings_with(propagator="Keplerian"))
        assert config.propagator_model == KeplerianModel()

    def test_lof_type_case_insensitive(self):
        config = ScenarioConfig.from_settings(settings_with(local_orbital_frame="tnw"))
        assert config.lof_type is LofType.TNW

    def test_numeric_strings_accepted(self):
        config = ScenarioConfig.from_settings(settings_with(sim_time_step_s="30", sim_duration_days="0.5"))
        assert config.step_count == 1440


class TestFromSettingsErrors:
    def test_missing_key(self):
        settings = dict(DEFAULT_SETTINGS)
        del settings["sim_time_step_s"]
        with pytest.raises(ConfigError, match="Missing key: sim_time_step_s"):
            ScenarioConfig.from_settings(settings)

    def test_unparseable_value(self):
        with pytest.raises(ConfigError, match="sat_eccentricity: expected a number, got 'abc'"):
            ScenarioConfig.from_settings(settings_with(sat_eccentricity="abc"))

    def test_all_problems_reported(self):
        settings = settings_with(sat_eccentricity="abc", target_lat_deg=None)
        del settings["sim_start_year"]
        with pytest.raises(ConfigError) as excinfo:
            ScenarioConfig.from_settings(settings)
        message = str(excinfo.value)
        assert "sat_eccentricity" in message
        assert "target_lat_deg" in message
        assert "sim_start_year" in message

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ConfigError, match="sim_time_step_s: expected a number"):
            ScenarioConfig.from_settings(settings_with(sim_time_step_s=True))

    def test_non_integer_year(self):
        with pytest.raises(ConfigError, match="sim_start_year: expected an integer"):
            ScenarioConfig.from_settings(settings_with(sim_start_year=2020.5))

    def test_invalid_date(self):
        with pytest.raises(ConfigError, match="invalid start date"):
            ScenarioConfig.from_settings(settings_with(sim_start_month=13))

    def test_unknown_propagator(self):
        with pytest.raises(ConfigError, match="propagator: unknown value 'sgp4'"):
            ScenarioConfig.from_settings(settings_with(propagator="sgp4"))

    def test_unknown_frame(self):
        with pytest.raises(ConfigError, match="local_orbital_frame: unknown frame"):
            ScenarioConfig.from_settings(settings_with(local_orbital_frame="QSW"))

    def test_bad_station(self):
        with pytest.raises(ConfigError, match="Latitude must be in range"):
            ScenarioConfig.from_settings(settings_with(target_lat_deg=123.0))

    def test_non_positive_step(self):
        with pytest.raises(ConfigError, match="time step must be > 0"):
            ScenarioConfig.from_settings(settings_with(sim_time_step_s=0.0))

    def test_duration_shorter_than_half_a_step(self):
        with pytest.raises(ConfigError, match="gives no simulation step"):
            ScenarioConfig.from_settings(settings_with(sim_duration_days=1e-6))

    def test_duration_overflowing_to_infinity(self):
        with pytest.raises(ConfigError, match="duration must be > 0 s and finite"):
            ScenarioConfig.from_settings(settings_with(sim_duration_days=1e305))

    def test_step_count_overflowing_to_infinity(self):
        with pytest.raises(ConfigError, match="gives too many steps"):
            ScenarioConfig.from_settings(settings_with(sim_duration_days=1e300, sim_time_step_s=1e-300))

    def test_bad_inclination(self):
        with pytest.raises(ConfigError, match="Invalid orbit settings"):
            ScenarioConfig.from_settings(settings_with(sat_inclination_deg=200.0))

    def test_hyperbolic_orbit(self):
        with pytest.raises(OrbitDegenerateError, match="Only elliptic orbits"):
            ScenarioConfig.from_settings(settings_with(sat_eccentricity=1.2))

    def test_negative_semi_major_axis(self):
        with pytest.raises(OrbitDegenerateError):
            ScenarioConfig.from_settings(settings_with(sat_altitude_m=-7000000.0))
