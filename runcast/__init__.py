"""runcast - weather-aware run planning."""

__version__ = "0.1.0"
