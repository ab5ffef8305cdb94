"""
Data models for the Redis cache layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class FilterType(str, Enum):
    """Portfolio filter categories."""
    ACCOUNT = "ACCOUNT"
    ASSET_CLASS = "ASSET_CLASS"
    DATA_SOURCE = "DATA_SOURCE"
    HOLDING = "HOLDING"
    PRESET_ID = "PRESET_ID"
    SEARCH_QUERY = "SEARCH_QUERY"
    SYMBOL = "SYMBOL"
    TAG = "TAG"


class Filter(BaseModel):
    """A single portfolio filter."""
    id: str
    type: FilterType


class AssetProfileIdentifier(BaseModel):
    """Identifies an asset by its data source and symbol."""
    data_source: str
    symbol: str


@dataclass
class ScanResult:
    """Outcome of a key scan.

    ``truncated`` is set when the store failed part way through; ``keys`` then
    holds whatever was collected before the failure.
    """
    keys: List[str] = field(default_factory=list)
    truncated: bool = False
    error: Optional[Exception] = None

    @property
    def complete(self) -> bool:
        return not self.truncated
