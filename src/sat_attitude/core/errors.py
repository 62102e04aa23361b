"""
Error taxonomy for the attitude/access simulator.

Configuration and orbit-validity errors are fatal and raised before the
time loop starts. Geometric degeneracies are recovered locally by the angle
engine. Output sink failures are reported by the simulation log and do not
stop the loop.
"""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for every error raised by sat_attitude."""


class ConfigError(SimulationError, ValueError):
    """A scenario parameter is missing, unparseable or out of range."""


class OrbitDegenerateError(SimulationError, ValueError):
    """Orbital elements do not describe a bound orbit above the planet surface."""


class DegenerateGeometryError(SimulationError, ArithmeticError):
    """A vector needed for an angle or a frame axis has zero length."""


class OutputSinkError(SimulationError, OSError):
    """An output stream could not be written."""
