import pytest

from duration import DurationPolicy
from workflows import (
    WorkflowKind,
    build_record,
    finalize_record,
    finished,
    in_progress,
    item_rows,
)


@pytest.fixture
def solda_form():
    return {
        "data": "2024-01-01",
        "operador": "Neri",
        "hora_inicio": "07:00",
        "hora_termino": "17:30",
        "horas_extras": "",
        "itens": [
            {"sku": "S-1", "descricao": "Base", "op": "OP-10", "quantidade": "2"},
            {"sku": "", "descricao": "", "op": "", "quantidade": ""},
            {"sku": "S-2", "descricao": "Tampa", "op": "", "quantidade": "3"},
        ],
    }


def test_workflow_kind_tables_and_policies():
    assert WorkflowKind.CORTE.table == "apontamentos_corte"
    assert WorkflowKind.SOLDA.item_table == "apontamentos_solda_itens"
    assert WorkflowKind.PROJETO.item_table is None
    assert WorkflowKind.PINTURA.id_field == "id_fornada"
    assert WorkflowKind.PINTURA.item_key == "id_fornada"
    assert WorkflowKind.PINTURA.policy is DurationPolicy.RAW_ELAPSED
    assert WorkflowKind.SOLDA.policy is DurationPolicy.CALENDAR_RESTRICTED
    assert WorkflowKind.PINTURA.rations_mass
    assert not WorkflowKind.CORTE.rations_mass


def test_build_record_without_end_is_in_progress(solda_form):
    solda_form["hora_termino"] = ""
    record = build_record(WorkflowKind.SOLDA, solda_form)
    assert record["em_andamento"] is True
    assert record["horas_total"] is None
    assert record["data_termino"] is None
    assert record["hora_termino"] is None
    assert record["status"] == "Ativo"


def test_build_record_finished_uses_calendar(solda_form):
    record = build_record(WorkflowKind.SOLDA, solda_form)
    assert record["em_andamento"] is False
    assert record["data_termino"] == "2024-01-01"
    assert record["horas_total"] == pytest.approx(9.5)
    assert [row["sku"] for row in record["_itens"]] == ["S-1", "S-2"]
    assert "itens" not in record


def test_build_record_pintura_uses_raw_elapsed():
    record = build_record(
        WorkflowKind.PINTURA,
        {
            "data": "2024-01-01",
            "hora_inicio": "07:00",
            "hora_termino": "17:30",
            "forno": "Forno 1",
            "cor": "Branco",
            "kgs_tinta": "4,5",
            "horas_extras": "1",
            "itens": [],
        },
    )
    assert record["horas_total"] == pytest.approx(11.5)
    assert record["kgs_tinta"] == 4.5
    assert record["horas_extras"] == 1.0


def test_finalize_pintura_rations_hours_and_mass():
    record = {
        "id_fornada": 7,
        "data": "2024-01-01",
        "hora_inicio": "07:00",
        "kgs_tinta": 12,
        "em_andamento": True,
        "_itens": [
            {"sku": "P-1", "descricao": "Grade", "op": "OP-1", "quantidade": "1"},
            {"sku": "P-2", "descricao": "Porta", "op": "", "quantidade": "3"},
        ],
    }
    update, rows = finalize_record(WorkflowKind.PINTURA, record, "2024-01-01", "11:00", "0")
    assert update == {
        "data_termino": "2024-01-01",
        "hora_termino": "11:00",
        "horas_total": 4.0,
        "horas_extras": 0.0,
        "em_andamento": False,
    }
    assert [r["horas_rateadas"] for r in rows] == [1.0, 3.0]
    assert [r["kgs_rateados"] for r in rows] == [3.0, 9.0]
    assert all(r["id_fornada"] == 7 for r in rows)
    assert rows[0]["op"] == "OP-1"
    assert rows[1]["op"] is None


def test_finalize_corte_adds_overtime_before_rationing():
    record = {
        "id": 3,
        "data": "2024-01-01",
        "hora_inicio": "11:30",
        "_itens": [{"sku": "C-1", "quantidade": "1"}, {"sku": "C-2", "quantidade": "1"}],
    }
    update, rows = finalize_record(WorkflowKind.CORTE, record, "2024-01-01", "13:30", "1")
    assert update["horas_total"] == pytest.approx(2.0)
    assert [r["horas_rateadas"] for r in rows] == [1.0, 1.0]
    assert rows[0]["id_apontamento"] == 3
    assert "op" not in rows[0]
    assert "kgs_rateados" not in rows[0]


def test_finalize_projeto_has_no_items():
    record = {"id": 1, "data": "2024-01-05", "hora_inicio": "07:00", "sku": "X"}
    update, rows = finalize_record(WorkflowKind.PROJETO, record, "2024-01-05", "17:30")
    assert update["horas_total"] == pytest.approx(5.5)
    assert rows == []


def test_finalize_rejects_malformed_time():
    record = {"id": 1, "data": "2024-01-05", "hora_inicio": "07:00"}
    with pytest.raises(ValueError):
        finalize_record(WorkflowKind.PROJETO, record, "2024-01-05", "late")


def test_item_rows_zero_quantities():
    record = {"id": 9, "_itens": [{"sku": "A", "quantidade": "0"}]}
    rows = item_rows(WorkflowKind.SOLDA, record, 5.0)
    assert rows[0]["horas_rateadas"] == 0.0
    assert rows[0]["id_apontamento_solda"] == 9


def test_in_progress_and_finished_filters():
    records = [{"id": 1, "em_andamento": True}, {"id": 2, "em_andamento": False}, {"id": 3}]
    assert [r["id"] for r in in_progress(records)] == [1]
    assert [r["id"] for r in finished(records)] == [2, 3]
