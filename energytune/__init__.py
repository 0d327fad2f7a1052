"""EnergyTune pattern engine: recurring energy/stress themes from journal text."""

__version__ = "0.1.0"
