"""Synonymy resolution: name clusters, their manager and taxon concepts."""

from .cluster import NameCluster
from .concepts import TaxonConcept, segment_cluster
from .manager import NameClusterManager, UnregisteredNameError
from .synonymy import Synonymy

__all__ = [
    "NameCluster",
    "NameClusterManager",
    "Synonymy",
    "TaxonConcept",
    "UnregisteredNameError",
    "segment_cluster",
]
