"""Captive portal network setup for headless devices."""

__version__ = "0.1.0"
