"""honeycomb: toggle Android device-policy restrictions inside ABX user profiles."""

__version__ = "0.3.0"
