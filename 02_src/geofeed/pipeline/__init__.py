"""IngestionPipeline module."""

from .pipeline import IIngestionPipeline, IngestionPipeline

__all__ = ["IIngestionPipeline", "IngestionPipeline"]
