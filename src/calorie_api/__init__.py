"""Calorie Photo API: photo-to-calorie estimates and a daily food log."""

__version__ = "1.0.0"
