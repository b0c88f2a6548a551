"""IronLog: workout logging with canonical snapshots and read-time analytics."""

__version__ = "0.1.0"
