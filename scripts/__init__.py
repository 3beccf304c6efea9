"""
Scripts for MedTrack
Utility scripts for seeding accounts and demo data
"""

from .seed_data import seed_all, seed_operator

__all__ = [
    "seed_all",
    "seed_operator"
]
