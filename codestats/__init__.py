"""Code stats insights: language usage pie charts driven by a live settings cascade."""

__version__ = "1.0.0"
