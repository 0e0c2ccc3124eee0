"""CalorIA: photograph a meal, get an estimated calorie breakdown."""

__version__ = "0.1.0"
