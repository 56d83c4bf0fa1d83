#Expose the high-level pipeline pieces:
#Candidate filtering (hard rules)
#Scoring / ranking
#Assignment selector (commit with per-driver locking)
#DeliveryService facade (the "one call" entry points)

from .candidate_filter import build_base_candidates
from .scoring import AssignmentScore, DriverScorer, rank_candidates
from .dispatcher import AssignmentConflict, AssignmentSelector, NoDriverAvailable
from .service import AssignmentResult, DeliveryService

__all__ = [
    "build_base_candidates",
    "AssignmentScore",
    "DriverScorer",
    "rank_candidates",
    "AssignmentConflict",
    "AssignmentSelector",
    "NoDriverAvailable",
    "AssignmentResult",
    "DeliveryService",
]
