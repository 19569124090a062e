"""Application use cases package."""

from .compute_statistics import AggregationReport, ComputeStatisticsUseCase
from .load_hierarchy import LoadHierarchyUseCase
from .manage_hierarchy import HierarchyOperationsUseCase

__all__ = [
    "AggregationReport",
    "ComputeStatisticsUseCase",
    "LoadHierarchyUseCase",
    "HierarchyOperationsUseCase",
]
