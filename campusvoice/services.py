"""Wiring of storage, collaborators and services from :class:`Settings`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from campusvoice.analysis import ComplaintAnalyzer
from campusvoice.auth.service import AuthService
from campusvoice.complaints.clustering import ClusterEngine
from campusvoice.complaints.service import ComplaintService
from campusvoice.config import Settings
from campusvoice.llm import LLMClient
from campusvoice.moderation import AbuseDetector, LLMAbuseClassifier
from campusvoice.notes.service import NotesService
from campusvoice.storage import create_storage
from campusvoice.storage.base import Storage

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    storage: Storage
    auth: AuthService
    complaints: ComplaintService
    notes: NotesService

    @property
    def clusters(self) -> ClusterEngine:
        return self.complaints.clusters


def build_services(
    settings: Settings,
    storage: Optional[Storage] = None,
    llm_client: Optional[LLMClient] = None,
    detector: Optional[AbuseDetector] = None,
    analyzer: Optional[ComplaintAnalyzer] = None,
) -> Services:
    """Assemble the service graph. Explicit arguments replace the defaults."""
    storage = storage or create_storage(settings)

    if llm_client is None and settings.llm_enabled:
        llm_client = LLMClient(model=settings.llm_model)
    if llm_client is not None and not llm_client.configured:
        logger.info("ANTHROPIC_API_KEY not set; AI fallback and analysis use heuristics only")

    if detector is None:
        detector = AbuseDetector(LLMAbuseClassifier(llm_client) if llm_client else None)
    if analyzer is None:
        analyzer = ComplaintAnalyzer(llm_client)

    clusters = ClusterEngine(storage, threshold=settings.cluster_overlap_threshold)
    return Services(
        settings=settings,
        storage=storage,
        auth=AuthService(storage, settings),
        complaints=ComplaintService(storage, detector, analyzer, clusters, settings),
        notes=NotesService(storage),
    )
