"""
Shared base for persisted records.

Every record round-trips through JSON verbatim: keys keep their original
camelCase spelling through field aliases, and keys this version does not
know about are carried along untouched.
"""

import math
import time
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict


class RecordModel(BaseModel):
    """Base class for records stored in the JSON documents."""
    
    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )
    
    def to_document(self) -> dict[str, Any]:
        """Serialize with the original key names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def new_id() -> str:
    """Create a fresh record identity."""
    return str(uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds (the stored timestamp format)."""
    return int(time.time() * 1000)


def coerce_amount(value: Any) -> float:
    """
    Turn a stored amount into a float.
    
    Missing, blank, unparseable and NaN amounts all count as 0.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number
