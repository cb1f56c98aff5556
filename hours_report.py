"""Export finished shop-floor records and their rationed items to CSV.

Records are read as a JSON list on ``stdin``.  Each record carries a ``workflow``
(``projeto``, ``corte``, ``solda`` or ``pintura``) plus the form fields
``data``, ``hora_inicio``, ``data_termino``, ``hora_termino``,
``horas_extras`` and, for batch workflows, ``itens`` (and ``kgs_tinta`` for
paint).  Records without ``hora_termino`` are still in progress and are not
exported.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from collections import defaultdict
from typing import Dict, List

from config.calendar import load_calendar
from duration import DurationPolicy, parse_timestamp
from time_utils import business_hours_breakdown
from workflows import WorkflowKind, build_record, finished, item_rows

logger = logging.getLogger(__name__)

RECORD_HEADERS = {
    WorkflowKind.PROJETO: ["ID", "Data", "Data_Termino", "Operador", "Tipo", "SKU", "OP", "Descricao",
                           "Hora_Inicio", "Hora_Termino", "Horas_Extras", "Horas_Total", "Status"],
    WorkflowKind.CORTE: ["ID", "Data", "Data_Termino", "Operador", "Equipamento", "OP",
                         "Hora_Inicio", "Hora_Termino", "Horas_Extras", "Horas_Total", "Status"],
    WorkflowKind.SOLDA: ["ID", "Data", "Data_Termino", "Operador",
                         "Hora_Inicio", "Hora_Termino", "Horas_Extras", "Horas_Total", "Status"],
    WorkflowKind.PINTURA: ["ID_Fornada", "Data", "Data_Termino", "Forno", "Cor", "Kgs_Tinta",
                           "Hora_Inicio", "Hora_Termino", "Horas_Extras", "Horas_Total", "Status"],
}

ITEM_HEADERS = {
    WorkflowKind.CORTE: ["ID_Apontamento", "SKU", "Descricao", "Quantidade", "Horas_Rateadas", "Status"],
    WorkflowKind.SOLDA: ["ID_Apontamento_Solda", "SKU", "Descricao", "OP", "Quantidade",
                         "Horas_Rateadas", "Status"],
    WorkflowKind.PINTURA: ["ID_Fornada", "SKU", "Descricao", "OP", "Quantidade", "Horas_Rateadas",
                           "Kgs_Rateados", "Status"],
}

_TWO_DECIMALS = {"horas_total", "horas_rateadas", "kgs_rateados"}


def _cell(row: Dict, header: str):
    key = header.lower()
    value = row.get(key)
    if value is None:
        return ""
    if key in _TWO_DECIMALS:
        return f"{value:.2f}"
    return value


def collect_rows(records, calendar=None):
    """Return ``(record_rows, item_rows)`` grouped by :class:`WorkflowKind`.

    Raises:
        ValueError: for an unknown ``workflow`` or malformed dates and times.
    """

    by_kind: Dict[WorkflowKind, List[Dict]] = defaultdict(list)
    items: Dict[WorkflowKind, List[Dict]] = defaultdict(list)
    for position, form in enumerate(records, start=1):
        kind = WorkflowKind(str(form.get("workflow", "")).lower())
        record = build_record(kind, form, calendar)
        if not record.get(kind.id_field):
            record[kind.id_field] = record.get("id") or position
        by_kind[kind].append(record)

    for kind, kind_records in by_kind.items():
        done = finished(kind_records)
        by_kind[kind] = done
        for record in done:
            items[kind].extend(item_rows(kind, record, record["horas_total"]))
    return by_kind, items


def format_breakdown(kind, record, calendar=None):
    start = parse_timestamp(record["data"], record["hora_inicio"])
    end = parse_timestamp(record["data_termino"], record["hora_termino"])
    lines = [f"Breakdown for {kind.value} {record[kind.id_field]}:"]
    for seg_start, seg_end in business_hours_breakdown(start, end, calendar):
        seg_seconds = (seg_end - seg_start).total_seconds()
        lines.append(f"  {seg_start} -> {seg_end} ({seg_seconds / 3600.0:.2f}h)")
    return "\n".join(lines)


def _write_csv(path, headers, rows):
    with open(path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.writer(fh)
        writer.writerow(headers)
        for row in rows:
            writer.writerow([_cell(row, h) for h in headers])


def export_to_csv(by_kind, items, out_dir: str) -> List[str]:
    """Write one CSV per workflow and per item table into ``out_dir``."""
    os.makedirs(out_dir, exist_ok=True)
    written = []
    for kind, headers in RECORD_HEADERS.items():
        path = os.path.join(out_dir, f"Apontamentos_{kind.value.capitalize()}.csv")
        _write_csv(path, headers, by_kind.get(kind, []))
        written.append(path)
        if kind in ITEM_HEADERS:
            path = os.path.join(out_dir, f"Apontamentos_{kind.value.capitalize()}_Itens.csv")
            _write_csv(path, ITEM_HEADERS[kind], items.get(kind, []))
            written.append(path)
    return written


def main(argv: List[str] | None = None) -> None:
    """Entry point for command line usage."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s"
    )
    parser = argparse.ArgumentParser(description="Export shop-floor hours to CSV")
    parser.add_argument("--csv-dir", required=True, help="Directory to write CSV files")
    parser.add_argument(
        "--show-breakdown",
        action="store_true",
        help="Print business hour segments for each calendar-restricted record",
    )
    args = parser.parse_args(argv)

    try:
        records = json.load(sys.stdin)
    except json.JSONDecodeError:
        parser.error("Invalid JSON input")

    try:
        calendar = load_calendar()
    except ValueError as exc:
        parser.error(f"Invalid calendar config: {exc}")

    try:
        by_kind, items = collect_rows(records, calendar)
    except (KeyError, ValueError) as exc:
        parser.error(f"Invalid record: {exc}")

    if args.show_breakdown:
        for kind, kind_records in by_kind.items():
            if kind.policy is not DurationPolicy.CALENDAR_RESTRICTED:
                continue
            for record in kind_records:
                print(format_breakdown(kind, record, calendar))

    written = export_to_csv(by_kind, items, args.csv_dir)
    logger.info("Report written to %s (%d files)", args.csv_dir, len(written))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
