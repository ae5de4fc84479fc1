"""Web interface for the captive portal."""
