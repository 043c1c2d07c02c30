"""Concurrent scanner for Terraform module provider constraints."""

__version__ = "1.0.0"

from .config import PipelineConfig, RetryPolicy, load_config
from .dispatch import BatchResult, run_batch
from .models import ErrorKind, Outcome, ProviderRequirement, WorkItem
from .pipeline import ItemPipeline
from .summary import Categories, Summary, categorize, summarize

__all__ = [
    "BatchResult",
    "Categories",
    "ErrorKind",
    "ItemPipeline",
    "Outcome",
    "PipelineConfig",
    "ProviderRequirement",
    "RetryPolicy",
    "Summary",
    "WorkItem",
    "categorize",
    "load_config",
    "run_batch",
    "summarize",
]
