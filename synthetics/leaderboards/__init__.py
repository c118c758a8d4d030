"""
Leaderboards package.
"""

from synthetics.leaderboards.position_scores import Position, PositionScore, compute_scores

__all__ = [
    "Position",
    "PositionScore",
    "compute_scores",
]
