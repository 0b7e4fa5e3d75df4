"""Problem bank service layer."""

from .models import ClusterListing, ClusterProblem, ComputeResult, SimilarityStats
from .service import ProblemBankService
from .stages import PipelineStage

__all__ = [
    "ClusterListing",
    "ClusterProblem",
    "ComputeResult",
    "PipelineStage",
    "ProblemBankService",
    "SimilarityStats",
]
