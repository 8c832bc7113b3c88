# tests/test_stats.py

from datetime import date
from itertools import permutations

import pytest

from tablero_auditorias.parsers.records import AuditFile, AuditItem, AuditStatus, compute_cumplimiento
from tablero_auditorias.services.stats import (
    Bucket,
    build_annual_calendar,
    compute_category_breakdown,
    compute_stats,
    filter_files,
    most_problematic,
    stats_to_dict,
)


def _item(n, pregunta, estado, categoria="GENERAL", fecha=date(2024, 1, 10)):
    return AuditItem(
        id=f"f-{n}",
        operacion="Norte",
        responsable="",
        cliente="",
        fecha=fecha,
        auditor="Ana",
        categoria=categoria,
        item=str(n),
        pregunta=pregunta,
        estado=estado,
    )


def _file(name, operacion, auditor, fecha, cumplimiento, total=10, no_aplica=0, items=()):
    return AuditFile(
        file_name=name,
        operacion=operacion,
        responsable="",
        cliente="",
        fecha=fecha,
        auditor=auditor,
        items=list(items),
        cumplimiento=cumplimiento,
        total_items=total,
        no_aplica=no_aplica,
    )


@pytest.mark.parametrize(
    "t, c, p, n, expected",
    [
        (3, 1, 0, 0, 33.33),
        (4, 1, 1, 1, 50.0),
        (10, 10, 0, 0, 100.0),
        (5, 0, 0, 5, 0.0),
        (0, 0, 0, 0, 0.0),
        (7, 2, 3, 1, round((2 + 1.5) / 6 * 100, 2)),
    ],
)
def test_compute_cumplimiento(t, c, p, n, expected):
    assert compute_cumplimiento(t, c, p, n) == expected


def test_running_average_order_independent():
    values = [80.0, 55.5, 100.0, 12.25]
    expected = sum(values) / len(values)

    for order in permutations(values):
        b = Bucket()
        for v in order:
            b.add(1, v)
        assert b.cumplimiento == pytest.approx(expected)
        assert b.auditorias == len(values)


def test_compute_stats_buckets():
    files = [
        _file("a.xlsx", "Norte", "Ana", date(2024, 1, 5), 80.0, total=10, no_aplica=2),
        _file("b.xlsx", "Norte", "Luis", date(2024, 1, 20), 60.0, total=5),
        _file("c.xlsx", "Sur", "Ana", date(2024, 3, 1), 90.0, total=8, no_aplica=1),
    ]

    stats = compute_stats(files)

    assert stats.total_auditorias == 3
    assert stats.total_items == 23
    assert stats.no_aplica == 3
    assert stats.cumplimiento_promedio == pytest.approx(230 / 3)

    assert stats.por_operacion["Norte"].total == 13
    assert stats.por_operacion["Norte"].cumplimiento == pytest.approx(70.0)
    assert stats.por_auditor["Ana"].auditorias == 2
    assert set(stats.por_mes) == {"2024-01", "2024-03"}
    assert stats.por_mes["2024-03"].total == 7


def test_stats_empty():
    d = stats_to_dict(compute_stats([]))
    assert d["totalAuditorias"] == 0
    assert d["cumplimientoPromedio"] == 0.0
    assert d["porMes"] == {}
    assert d["itemsMasProblematicos"] == []


def test_stats_to_dict_sorted_months():
    files = [
        _file("a.xlsx", "Norte", "Ana", date(2024, 5, 5), 80.0),
        _file("b.xlsx", "Norte", "Ana", date(2023, 12, 1), 60.0),
    ]
    d = stats_to_dict(compute_stats(files))
    assert list(d["porMes"]) == ["2023-12", "2024-05"]
    assert d["porOperacion"]["Norte"]["auditorias"] == 2


def test_most_problematic_top_10():
    items = []
    n = 0
    for q in range(12):
        for _ in range(q + 1):
            n += 1
            items.append(_item(n, f"¿Pregunta {q}?", AuditStatus.NO_CUMPLE))
    items.append(_item(999, "¿Pregunta 11?", AuditStatus.CUMPLE))

    top = most_problematic(items)

    assert len(top) == 10
    assert top[0].pregunta == "¿Pregunta 11?"
    assert top[0].no_cumple == 12
    assert [p.no_cumple for p in top] == sorted((p.no_cumple for p in top), reverse=True)


def test_most_problematic_groups_by_categoria():
    items = [
        _item(1, "¿Extintores?", AuditStatus.NO_CUMPLE, categoria="BODEGA"),
        _item(2, "¿Extintores?", AuditStatus.NO_CUMPLE, categoria="OFICINA"),
        _item(3, "¿Extintores?", AuditStatus.NO_CUMPLE, categoria="BODEGA"),
    ]
    top = most_problematic(items)
    assert [(p.categoria, p.no_cumple) for p in top] == [("BODEGA", 2), ("OFICINA", 1)]
    assert top[0].to_dict()["frecuencia"] == 2


def test_filter_files():
    files = [
        _file("a.xlsx", "Norte", "Ana", date(2024, 1, 5), 80.0),
        _file("b.xlsx", "Sur", "Ana", date(2024, 1, 5), 80.0),
        _file("c.xlsx", "Norte", "Luis", date(2024, 1, 5), 80.0),
    ]
    assert [f.file_name for f in filter_files(files, operacion="Norte")] == ["a.xlsx", "c.xlsx"]
    assert [f.file_name for f in filter_files(files, operacion="Norte", auditor="Luis")] == ["c.xlsx"]
    assert len(filter_files(files)) == 3


def test_category_breakdown():
    items = [
        _item(1, "¿a?", AuditStatus.CUMPLE, categoria="SEGURIDAD"),
        _item(2, "¿b?", AuditStatus.CUMPLE_PARCIAL, categoria="SEGURIDAD"),
        _item(3, "¿c?", AuditStatus.NO_APLICA, categoria="SEGURIDAD"),
        _item(4, "¿d?", AuditStatus.CUMPLE, categoria="ORDEN"),
        _item(5, "¿e?", AuditStatus.NO_APLICA, categoria="SOLO NA"),
    ]

    rows = compute_category_breakdown(items)

    assert [r["categoria"] for r in rows] == ["ORDEN", "SEGURIDAD"]
    assert rows[0]["cumplimiento"] == 100.0
    assert rows[1]["cumplimiento"] == 75.0
    assert rows[1]["total"] == 2


def test_annual_calendar():
    files = [
        _file("a.xlsx", "Norte", "Ana", date(2024, 1, 5), 80.0),
        _file("b.xlsx", "Norte", "Ana", date(2024, 1, 25), 61.0),
        _file("c.xlsx", "Sur", "Ana", date(2024, 3, 1), 90.0),
        _file("d.xlsx", "Sur", "Ana", date(2023, 3, 1), 10.0),
    ]

    cal = build_annual_calendar(files)

    assert cal["year"] == 2024
    norte, sur = cal["rows"]
    assert norte["operacion"] == "Norte"
    assert norte["meses"][0] == 70.5
    assert norte["meses"][1] is None
    assert sur["meses"][2] == 90.0

    cal_2023 = build_annual_calendar(files, year=2023)
    assert cal_2023["rows"][0]["meses"] == [None] * 12
    assert cal_2023["rows"][1]["meses"][2] == 10.0


def test_annual_calendar_empty():
    cal = build_annual_calendar([])
    assert cal["year"] == date.today().year
    assert cal["rows"] == []
