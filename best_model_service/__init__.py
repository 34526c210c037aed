"""Best-score model service: keeps the top-scoring model and persists it."""

from best_model_service.models import CommitResult, Record
from best_model_service.registry import BestScoreRegistry
from best_model_service.store import (
    InvalidRecordName,
    RecordParseError,
    RecordStore,
    StorageError,
)

__all__ = [
    "BestScoreRegistry",
    "CommitResult",
    "InvalidRecordName",
    "Record",
    "RecordParseError",
    "RecordStore",
    "StorageError",
]
