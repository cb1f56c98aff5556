"""Record building and finalization for the four shop-floor workflows."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from config.calendar import WeeklyCalendar
from duration import (
    DurationPolicy,
    TimeSpan,
    compute_total_hours,
    parse_adjustment,
    parse_timestamp,
)
from rationing import LineItem, ration_batch

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "Ativo"


class WorkflowKind(Enum):
    PROJETO = "projeto"
    CORTE = "corte"
    SOLDA = "solda"
    PINTURA = "pintura"

    @property
    def table(self) -> str:
        return f"apontamentos_{self.value}"

    @property
    def id_field(self) -> str:
        return "id_fornada" if self is WorkflowKind.PINTURA else "id"

    @property
    def item_table(self) -> Optional[str]:
        if self is WorkflowKind.PROJETO:
            return None
        return f"apontamentos_{self.value}_itens"

    @property
    def item_key(self) -> Optional[str]:
        return {
            WorkflowKind.CORTE: "id_apontamento",
            WorkflowKind.SOLDA: "id_apontamento_solda",
            WorkflowKind.PINTURA: "id_fornada",
        }.get(self)

    @property
    def rations_mass(self) -> bool:
        return self is WorkflowKind.PINTURA

    @property
    def policy(self) -> DurationPolicy:
        # Paint ovens run through lunch and outside the shift.
        return DurationPolicy.for_raw_elapsed(self is WorkflowKind.PINTURA)


def record_id(kind: WorkflowKind, record: Dict):
    return record.get(kind.id_field) or record.get("id")


def record_items(record: Dict) -> List[LineItem]:
    return [LineItem.from_row(row) for row in record.get("_itens") or record.get("itens") or []]


def _hours(kind, start_date, start_time, end_date, end_time, overtime, calendar):
    span = TimeSpan(
        parse_timestamp(start_date, start_time), parse_timestamp(end_date, end_time)
    )
    return compute_total_hours(span, calendar, parse_adjustment(overtime), kind.policy)


def build_record(
    kind: WorkflowKind, form: Dict, calendar: Optional[WeeklyCalendar] = None
) -> Dict:
    """Return a new record for ``form``.

    Without ``hora_termino`` the record is in progress (``em_andamento``) and
    carries no total.  A missing ``data_termino`` defaults to ``data``.
    """

    end_time = form.get("hora_termino") or None
    end_date = (form.get("data_termino") or form["data"]) if end_time else None
    record = {
        key: value
        for key, value in form.items()
        if key not in ("workflow", "itens", "data_termino", "hora_termino", "horas_extras")
    }
    record.update(
        {
            "data_termino": end_date,
            "hora_termino": end_time,
            "horas_extras": parse_adjustment(form.get("horas_extras")),
            "em_andamento": end_time is None,
            "status": form.get("status") or STATUS_ACTIVE,
        }
    )
    if kind.rations_mass:
        record["kgs_tinta"] = parse_adjustment(form.get("kgs_tinta"))
    if kind.item_table:
        record["_itens"] = [row for row in form.get("itens") or [] if row.get("sku")]
    record["horas_total"] = (
        _hours(
            kind,
            form["data"],
            form["hora_inicio"],
            end_date,
            end_time,
            form.get("horas_extras"),
            calendar,
        )
        if end_time
        else None
    )
    return record


def item_rows(
    kind: WorkflowKind, record: Dict, hours: float
) -> List[Dict[str, object]]:
    """Ration ``hours`` (and paint mass) over the items of ``record``."""
    item_key = kind.item_key
    if item_key is None:
        return []
    mass = parse_adjustment(record.get("kgs_tinta")) if kind.rations_mass else None
    rows = ration_batch(record_items(record), hours, mass)
    rid = record_id(kind, record)
    for row in rows:
        row[item_key] = rid
        row["status"] = STATUS_ACTIVE
        if kind is WorkflowKind.CORTE:
            row.pop("op", None)
    return rows


def finalize_record(
    kind: WorkflowKind,
    record: Dict,
    end_date: str,
    end_time: str,
    overtime=None,
    calendar: Optional[WeeklyCalendar] = None,
) -> Tuple[Dict, List[Dict[str, object]]]:
    """Close an in-progress ``record`` and ration its hours over its items.

    Returns:
        ``(update, item_rows)`` where ``update`` holds the fields to write to
        the record and ``item_rows`` the rationed rows for the item table.

    Raises:
        ValueError: if the dates or times are malformed.
    """

    hours = _hours(
        kind,
        record["data"],
        record["hora_inicio"],
        end_date,
        end_time,
        overtime,
        calendar,
    )
    update = {
        "data_termino": end_date,
        "hora_termino": end_time,
        "horas_total": hours,
        "horas_extras": parse_adjustment(overtime),
        "em_andamento": False,
    }
    rows = item_rows(kind, record, hours)
    logger.info(
        "Finalized %s %s: %.2fh over %d item(s)",
        kind.value,
        record_id(kind, record),
        hours,
        len(rows),
    )
    return update, rows


def in_progress(records: Iterable[Dict]) -> List[Dict]:
    return [r for r in records if r.get("em_andamento")]


def finished(records: Iterable[Dict]) -> List[Dict]:
    return [r for r in records if not r.get("em_andamento")]
