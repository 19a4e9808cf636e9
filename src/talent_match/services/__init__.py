"""
Services module combining matching, inference and persistence.
"""

from talent_match.services.matching_service import MatchingService
from talent_match.services.scheduling import InterviewScheduler, combine_date_time

__all__ = [
    "InterviewScheduler",
    "MatchingService",
    "combine_date_time",
]
