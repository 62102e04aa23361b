"""
Tests for the Sun/Earth angle computations.
"""
import math
import pytest

from sat_attitude.core.epoch import Epoch
from sat_attitude.core.ephemeris import Body, sun_position_eci_km
from sat_attitude.core.errors import DegenerateGeometryError
from sat_attitude.core.frames import InertialFrame, LocalOrbitalFrame, ZERO, scale, unit
from sat_attitude.core.propagator import ZonalHarmonicPropagator
from sat_attitude.core.state import SpacecraftState
from sat_attitude.physics.angles import AngleEngine, azimuth_elevation_deg, vector_angle_rad
from sat_attitude.physics.orbit import OrbitalElements


EPOCH = Epoch.from_calendar(2020, 1, 1)


@pytest.fixture
def engine():
    return AngleEngine()


@pytest.fixture
def sso_propagator():
    el = OrbitalElements.from_degrees(
        a_km=7078.137, e=0.0, inc_deg=98.1929, raan_deg=10.5834,
        argp_deg=0.0, mean_anomaly_deg=0.0, epoch=EPOCH,
    )
    return ZonalHarmonicPropagator(el)


class TestVectorAngle:
    def test_orthogonal(self):
        assert vector_angle_rad((1.0, 0.0, 0.0), (0.0, 2.0, 0.0)) == pytest.approx(math.pi / 2)

    def test_antiparallel(self):
        assert vector_angle_rad((1.0, 0.0, 0.0), (-3.0, 0.0, 0.0)) == pytest.approx(math.pi)

    def test_near_parallel_keeps_precision(self):
        assert vector_angle_rad((1.0, 0.0, 0.0), (1.0, 1e-9, 0.0)) == pytest.approx(1e-9, rel=1e-6)

    def test_zero_vector_raises(self):
        with pytest.raises(DegenerateGeometryError, match="zero-length"):
            vector_angle_rad(ZERO, (1.0, 0.0, 0.0))


class TestAzimuthElevation:
    @pytest.mark.parametrize(
        "v, expected",
        [
            ((1.0, 0.0, 0.0), (0.0, 0.0)),
            ((0.0, 1.0, 0.0), (90.0, 0.0)),
            ((-1.0, 0.0, 0.0), (180.0, 0.0)),
            ((0.0, -1.0, 0.0), (270.0, 0.0)),
            ((1.0, 1.0, math.sqrt(2.0)), (45.0, 45.0)),
            ((1.0, -1.0, -math.sqrt(2.0)), (315.0, -45.0)),
        ],
    )
    def test_axes(self, v, expected):
        az, el = azimuth_elevation_deg(v)
        assert az == pytest.approx(expected[0], abs=1e-9)
        assert el == pytest.approx(expected[1], abs=1e-9)

    def test_vector_on_plus_z(self):
        assert azimuth_elevation_deg((0.0, 0.0, 5.0)) == (0.0, 90.0)

    def test_vector_on_minus_z(self):
        assert azimuth_elevation_deg((0.0, 0.0, -5.0)) == (0.0, -90.0)

    def test_tiny_negative_y_wraps_to_zero(self):
        az, _el = azimuth_elevation_deg((1.0, -1e-20, 0.0))
        assert 0.0 <= az < 360.0

    def test_ranges_on_a_sweep(self):
        for i in range(36):
            for j in range(-8, 9):
                lon = math.radians(10.0 * i + 0.5)
                lat = math.radians(10.0 * j + 0.5)
                v = (math.cos(lat) * math.cos(lon), math.cos(lat) * math.sin(lon), math.sin(lat))
                az, el = azimuth_elevation_deg(v)
                assert 0.0 <= az < 360.0
                assert -90.0 <= el <= 90.0
                assert az == pytest.approx(math.degrees(lon) % 360.0, abs=1e-7)
                assert el == pytest.approx(math.degrees(lat), abs=1e-7)


class TestAngleEngine:
    def test_earth_at_nadir_in_vvlh(self, engine, sso_propagator):
        for k in range(0, 20):
            state = sso_propagator.propagate(EPOCH + 300.0 * k)
            angles = engine.earth_angles(state, LocalOrbitalFrame(state))
            assert angles.elevation_deg == pytest.approx(90.0, abs=1e-6)
            assert angles.epoch == state.epoch

    def test_sun_angle_ranges(self, engine, sso_propagator):
        for k in range(0, 100):
            state = sso_propagator.propagate(EPOCH + 60.0 * k)
            sun = engine.sun_angles(state, LocalOrbitalFrame(state))
            assert 0.0 <= sun.azimuth_deg < 360.0
            assert -90.0 <= sun.elevation_deg <= 90.0
            assert 0.0 <= sun.subsolar_deg <= 180.0

    def test_subsolar_zero_under_the_sun(self, engine):
        r = scale(unit(sun_position_eci_km(EPOCH)), 7000.0)
        state = SpacecraftState(epoch=EPOCH, r_eci_km=r, v_eci_km_s=(0.0, 0.0, 7.5))
        assert engine.subsolar_angle_deg(state) == pytest.approx(0.0, abs=1e-6)

    def test_subsolar_180_on_night_side(self, engine):
        r = scale(unit(sun_position_eci_km(EPOCH)), -7000.0)
        state = SpacecraftState(epoch=EPOCH, r_eci_km=r, v_eci_km_s=(0.0, 0.0, 7.5))
        assert engine.subsolar_angle_deg(state) == pytest.approx(180.0, abs=1e-6)

    def test_sun_seen_from_sunlit_point_is_at_zenith(self, engine):
        # Directly under the Sun, the Sun sits on -Z (away from nadir) in VVLH
        r = scale(unit(sun_position_eci_km(EPOCH)), 7000.0)
        state = SpacecraftState(epoch=EPOCH, r_eci_km=r, v_eci_km_s=(0.0, 0.0, 7.5))
        sun = engine.sun_angles(state, LocalOrbitalFrame(state))
        assert sun.elevation_deg == pytest.approx(-90.0, abs=1e-3)

    def test_degenerate_body_direction_falls_back(self, engine):
        # Earth at the origin of the inertial frame has no direction
        az, el = engine.body_azimuth_elevation_deg(Body.EARTH, EPOCH, InertialFrame())
        assert (az, el) == (0.0, 90.0)

    def test_degenerate_subsolar_falls_back(self, engine):
        state = SpacecraftState(epoch=EPOCH, r_eci_km=ZERO, v_eci_km_s=(0.0, 7.5, 0.0))
        assert engine.subsolar_angle_deg(state) == 0.0
