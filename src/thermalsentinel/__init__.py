"""Thermal Sentinel: live turbine temperature monitoring and incident analysis."""
__version__ = "0.1.0"
