"""
Key/value store schemas
"""
from typing import Optional

from pydantic import BaseModel


class KVValueIn(BaseModel):
    value: Optional[str] = None


class KVEntryOut(BaseModel):
    key: str
    value: Optional[str] = None
