"""Service modules"""
from .monitor import Monitor
from .prices import PriceBook

__all__ = ["Monitor", "PriceBook"]
