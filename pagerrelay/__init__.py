"""PagerDuty notification relay for a Redis-backed monitoring pipeline."""

__version__ = "0.1.0"
