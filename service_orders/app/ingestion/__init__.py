"""
Ingestion package for the Order Cache service.

- pipeline: decode inbound payloads, update the cache, persist
- recovery: rebuild the cache from the durable store at startup
"""

from .pipeline import IngestionPipeline, PipelineStats
from .recovery import RecoveryLoader, RecoveryReport

__all__ = ["IngestionPipeline", "PipelineStats", "RecoveryLoader", "RecoveryReport"]
