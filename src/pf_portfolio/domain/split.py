"""Stock split adjustment.

A split "old:new" turns every `old` shares held before the split date into
`new` shares: quantity is multiplied by new/old and price divided by it, so
each trade's value is unchanged.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from src.pf_common.decimals import to_amount_scale, to_quantity_scale
from src.pf_common.errors import InvalidSplitRatioError
from src.pf_import.domain.models import Trade

_RATIO_RE = re.compile(r"^\s*(\d+)\s*:\s*(\d+)\s*$")


@dataclass(frozen=True)
class SplitRatio:
    old: int
    new: int

    @property
    def multiplier(self) -> Decimal:
        return Decimal(self.new) / Decimal(self.old)

    def __str__(self) -> str:
        return f"{self.old}:{self.new}"


def parse_ratio(raw: str) -> SplitRatio:
    match = _RATIO_RE.match(raw or "")
    if not match:
        raise InvalidSplitRatioError(raw)
    old, new = int(match.group(1)), int(match.group(2))
    if old <= 0 or new <= 0:
        raise InvalidSplitRatioError(raw)
    return SplitRatio(old=old, new=new)


@dataclass(frozen=True)
class SplitAdjustment:
    trade_id: int
    trade_date: date
    trade_type: str
    old_quantity: Decimal
    new_quantity: Decimal
    old_price: Decimal
    new_price: Decimal


def plan_split(trades: list[Trade], ratio: SplitRatio) -> list[SplitAdjustment]:
    multiplier = ratio.multiplier
    return [
        SplitAdjustment(
            trade_id=t.id,
            trade_date=t.trade_date,
            trade_type=t.trade_type.value,
            old_quantity=t.quantity,
            new_quantity=to_quantity_scale(t.quantity * multiplier),
            old_price=t.price,
            new_price=to_amount_scale(t.price / multiplier),
        )
        for t in trades
    ]
