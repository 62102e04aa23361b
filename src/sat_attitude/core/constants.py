from __future__ import annotations

# Earth gravitational parameter (mu) in km^3/s^2 (EIGEN-5C)
MU_EARTH_KM3_S2: float = 398600.4415

# Equatorial Earth radius in km (WGS-84)
R_EARTH_KM: float = 6378.137

# WGS-84 flattening
FLATTENING_EARTH: float = 1.0 / 298.257223563

# Equatorial radius used by the zonal gravity model, km (EIGEN-5C)
R_EARTH_GRAVITY_KM: float = 6378.13646

# Unnormalized zonal harmonics, J_n = -C_n0 (EIGEN-5C)
J2_EARTH: float = 1.08262668355e-3
J3_EARTH: float = -2.53265648533e-6

# Astronomical unit in km
AU_KM: float = 149597870.7

# Julian day of the J2000 reference epoch (2000-01-01 12:00:00)
JD_J2000: float = 2451545.0

SECONDS_PER_DAY: float = 86400.0
