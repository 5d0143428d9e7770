"""rostercap - salary-cap fantasy football roster transfer engine."""

__version__ = "0.1.0"
