from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class PoolRatioResponse(BaseModel):
    pair: str
    numerator: Decimal
    denominator: Decimal
    updated_at: datetime
