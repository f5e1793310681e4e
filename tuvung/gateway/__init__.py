"""Access to the managed backend: relational data and blob storage."""

from .base import DataGateway
from .records import (
    CourseRecord,
    LectureRecord,
    MeaningInput,
    MeaningRecord,
    WordDraft,
    WordRecord,
)
from .result import Err, GatewayResult, Ok
from .sql_gateway import SqlGateway
from .storage import SupabaseStorage
from .supabase_gateway import SupabaseGateway

__all__ = [
    "DataGateway",
    "CourseRecord",
    "LectureRecord",
    "MeaningInput",
    "MeaningRecord",
    "WordDraft",
    "WordRecord",
    "Err",
    "GatewayResult",
    "Ok",
    "SqlGateway",
    "SupabaseGateway",
    "SupabaseStorage",
]
