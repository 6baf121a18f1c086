"""Shared utilities for decay and saturation."""

from .scores import LN2, days_between, half_life_decay, saturate

__all__ = [
    "LN2",
    "days_between",
    "half_life_decay",
    "saturate",
]
