"""
Frontier detection module.

Extracts frontier snapshots from occupancy grids.
"""
from .detector import FrontierDetector

__all__ = ['FrontierDetector']
