"""Keyword-overlap clustering and urgency bookkeeping.

A cluster's ``problem_count`` is always recounted from storage, never
incremented, so any recompute repairs earlier drift. The recompute writes the
cluster and fans the same count/urgency out to its unsolved members inside one
storage unit of work.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from campusvoice.complaints.models import ClusterGroup, Urgency, calculate_urgency, utcnow
from campusvoice.storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_OVERLAP_THRESHOLD = 0.30


def keyword_overlap(first: Optional[Iterable[str]], second: Optional[Iterable[str]]) -> float:
    """Jaccard overlap of two keyword collections, case-insensitive.

    Returns 0.0 when either side is empty.
    """
    a = {k.lower() for k in first or ()}
    b = {k.lower() for k in second or ()}
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


class ClusterEngine:
    """Assigns complaints to clusters and keeps urgency in sync with membership."""

    def __init__(self, storage: Storage, threshold: float = DEFAULT_OVERLAP_THRESHOLD) -> None:
        self._storage = storage
        self.threshold = threshold

    def get_or_create_cluster(self, keywords: Optional[list[str]]) -> Optional[ClusterGroup]:
        """Return the first cluster overlapping *keywords* enough, creating one if none does.

        First match wins in storage order, not best match. Empty or missing
        keywords are never clustered and touch nothing.
        """
        if not keywords:
            return None

        with self._storage.transaction():
            for cluster in self._storage.list_clusters():
                if cluster.keywords and keyword_overlap(keywords, cluster.keywords) >= self.threshold:
                    return cluster

            cluster = ClusterGroup(
                keywords=list(keywords),
                problem_count=1,
                urgency=Urgency.normal,
            )
            self._storage.add_cluster(cluster)
            logger.info("Created cluster %s for keywords %s", cluster.id, keywords)
            return cluster

    def update_cluster_count(self, cluster_id: str) -> tuple[int, Urgency]:
        """Recount unsolved members of *cluster_id* and propagate the urgency.

        Solved members are left untouched. Returns ``(count, urgency)``.
        """
        with self._storage.transaction():
            active = self._storage.list_complaints(cluster_id=cluster_id, solved=False)
            count = len(active)
            urgency = calculate_urgency(count)

            cluster = self._storage.get_cluster(cluster_id)
            if cluster is not None:
                cluster.problem_count = count
                cluster.urgency = urgency
                cluster.last_updated = utcnow()
                self._storage.save_cluster(cluster)
            else:
                logger.warning("Recount requested for unknown cluster %s", cluster_id)

            for complaint in active:
                if complaint.similar_complaints_count != count or complaint.urgency != urgency:
                    complaint.similar_complaints_count = count
                    complaint.urgency = urgency
                    self._storage.save_complaint(complaint)

        logger.debug("Cluster %s recounted: %d active, %s", cluster_id, count, urgency.value)
        return count, urgency

    def recalculate_urgencies(self) -> int:
        """Recount every stored cluster. Returns how many were swept."""
        clusters = self._storage.list_clusters()
        for cluster in clusters:
            self.update_cluster_count(cluster.id)
        logger.info("Recalculated urgency for %d clusters", len(clusters))
        return len(clusters)

    def prune_empty_clusters(self) -> list[str]:
        """Delete clusters that no complaint references any more.

        Never called implicitly; orphan clusters are kept unless an operator
        asks for this.
        """
        removed: list[str] = []
        with self._storage.transaction():
            for cluster in self._storage.list_clusters():
                if self._storage.count_complaints(cluster_id=cluster.id) == 0:
                    self._storage.delete_cluster(cluster.id)
                    removed.append(cluster.id)
        if removed:
            logger.info("Pruned %d empty clusters", len(removed))
        return removed
