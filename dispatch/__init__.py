#Expose the high-level pipeline pieces:
#Candidate pre-filtering (storage query + polyline hydration)
#Rider -> driver assignment across pools
#Dispatcher orchestrator (the "one call" batch entry point)

from .candidate_filter import CandidateQuery, CandidateRecord, find_candidate_trips
from .dispatcher import Assignment, DispatchResult, Dispatcher, assign_riders_to_drivers

__all__ = [
    "CandidateQuery",
    "CandidateRecord",
    "find_candidate_trips",
    "Assignment",
    "DispatchResult",
    "Dispatcher",
    "assign_riders_to_drivers",
]
