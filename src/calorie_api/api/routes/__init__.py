"""API routes."""

from . import analyze_food, food_log, images

__all__ = ["analyze_food", "food_log", "images"]
