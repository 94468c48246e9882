"""Record persistence layer.

SQLite-backed JSON document store plus the typed registry of datasets,
their bonding curve records, trained model info, and storage state.
"""

from datacurve.records.database import RecordDatabase
from datacurve.records.models import CurveRecord, DatasetRecord
from datacurve.records.registry import DatasetRegistry
from datacurve.records.store import RecordStore

__all__ = [
    "CurveRecord",
    "DatasetRecord",
    "DatasetRegistry",
    "RecordDatabase",
    "RecordStore",
]
