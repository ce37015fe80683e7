"""Multi-target HTTP(S) uptime prober."""

__version__ = "0.1.0"
