"""Meal calorie analysis: models, prompts, errors and the relay service."""
