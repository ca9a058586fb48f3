"""
AcadBoost - AI Module Initialization
Text enrichment for seeded test histories.
"""
from acadboost.ai.enrichment import (
    EnrichmentService,
    GenerativeTextService,
    LLMTextService,
    TestSnapshot,
    default_topics,
    fallback_test_analysis,
    get_enrichment_service,
    local_subject_analysis,
)

__all__ = [
    "EnrichmentService",
    "GenerativeTextService",
    "LLMTextService",
    "TestSnapshot",
    "default_topics",
    "fallback_test_analysis",
    "get_enrichment_service",
    "local_subject_analysis",
]
