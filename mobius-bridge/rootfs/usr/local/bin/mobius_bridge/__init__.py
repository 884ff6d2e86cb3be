"""Mobius cloud to MQTT bridge for EcoTech Radion and VorTech devices."""

__version__ = "0.1.0"
