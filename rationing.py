"""Proportional rationing of batch totals across line items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional


@dataclass(frozen=True)
class LineItem:
    sku: str
    quantity: Optional[float]
    description: str = ""
    order_ref: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping) -> "LineItem":
        """Build an item from a form row with ``sku``/``quantidade``/``descricao``/``op``."""
        raw = row.get("quantidade", row.get("quantity"))
        if isinstance(raw, str):
            raw = raw.strip().replace(",", ".")
        quantity = float(raw) if raw not in (None, "") else None
        return cls(
            sku=str(row.get("sku") or "").strip(),
            quantity=quantity,
            description=row.get("descricao") or row.get("description") or "",
            order_ref=row.get("op") or row.get("order_ref") or None,
        )


@dataclass(frozen=True)
class RationedShare:
    item: LineItem
    share: float


def retained_items(items: Iterable[LineItem]) -> List[LineItem]:
    """Drop items without a SKU or without a declared quantity."""
    return [i for i in items if i.sku and i.quantity is not None]


def allocate(total: float, items: Iterable[LineItem]) -> List[RationedShare]:
    """Split ``total`` across ``items`` in proportion to their quantities.

    If the retained quantities sum to zero or less every item gets ``0``.
    """

    kept = retained_items(items)
    weights = [i.quantity or 0.0 for i in kept]
    weight = sum(weights)
    if weight <= 0:
        return [RationedShare(i, 0.0) for i in kept]
    return [RationedShare(i, total * q / weight) for i, q in zip(kept, weights)]


def ration_batch(
    items: Iterable[LineItem], hours: float, mass: Optional[float] = None
) -> List[Dict[str, object]]:
    """Return one row per retained item with its rationed hours and mass."""
    kept = retained_items(items)
    hour_shares = allocate(hours, kept)
    mass_shares = allocate(mass, kept) if mass is not None else None

    rows: List[Dict[str, object]] = []
    for index, hour_share in enumerate(hour_shares):
        item = hour_share.item
        row: Dict[str, object] = {
            "sku": item.sku,
            "descricao": item.description,
            "op": item.order_ref,
            "quantidade": item.quantity,
            "horas_rateadas": hour_share.share,
        }
        if mass_shares is not None:
            row["kgs_rateados"] = mass_shares[index].share
        rows.append(row)
    return rows
