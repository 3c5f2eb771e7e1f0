from .summary_mapper import ClusterSummaryMapper

__all__ = [
    "ClusterSummaryMapper",
]
