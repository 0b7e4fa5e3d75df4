"""Data models for the problem bank."""

from .cluster import Cluster, ClusterMembership, ClusterStatus, MembershipSource
from .cycle import (
    ContextDiscovery,
    CycleAggregate,
    ImpactAssessment,
    ProblemDiscovery,
    ValueAssessment,
)
from .problem import Evidence, ProblemRecord, ProblemStatus, ValidationStatus
from .similarity import SimilarityEdge, canonical_pair

__all__ = [
    "Cluster",
    "ClusterMembership",
    "ClusterStatus",
    "ContextDiscovery",
    "CycleAggregate",
    "Evidence",
    "ImpactAssessment",
    "MembershipSource",
    "ProblemDiscovery",
    "ProblemRecord",
    "ProblemStatus",
    "SimilarityEdge",
    "ValidationStatus",
    "ValueAssessment",
    "canonical_pair",
]
