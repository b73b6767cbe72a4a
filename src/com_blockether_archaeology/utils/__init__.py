"""
Utility modules for the archaeology framework.
"""

from .BatchProcessor import BatchFailure, BatchOutcome, BatchProcessor

__all__ = [
    "BatchProcessor",
    "BatchOutcome",
    "BatchFailure",
]
