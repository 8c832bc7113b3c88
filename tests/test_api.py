# tests/test_api.py

from io import BytesIO


def _put_config(client, config):
    return client.put("/api/config", json=config.to_dict())


def _upload(client, files, field="files", url="/api/uploads"):
    data = {field: [(BytesIO(content), name) for name, content in files]}
    return client.post(url, data=data, content_type="multipart/form-data")


def test_health(client):
    r = client.get("/health/")
    assert r.status_code == 200
    assert r.get_json() == {"status": "healthy", "auditorias": 0}


def test_config_cycle(client, checklist_config):
    r = client.get("/api/config")
    assert r.get_json()["config"] is None
    assert r.get_json()["errors"]

    r = _put_config(client, checklist_config)
    assert r.status_code == 200
    assert r.get_json()["config"]["headerRowIndex"] == 3

    assert client.get("/api/config").get_json()["errors"] == []

    r = client.delete("/api/config")
    assert r.status_code == 200
    assert client.get("/api/config").get_json()["config"] is None


def test_config_incomplete_rejected(client):
    r = client.put("/api/config", json={"pregunta": 1})
    assert r.status_code == 422
    assert "La columna 'Cumple' no está configurada" in r.get_json()["errors"]


def test_config_invalid_payload(client):
    r = client.put("/api/config", json={"pregunta": "uno"})
    assert r.status_code == 400
    assert "error" in r.get_json()


def test_upload_all_ok_is_accepted(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)

    r = _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))])
    body = r.get_json()

    assert r.status_code == 200
    assert body["accepted"] is True
    assert body["batchId"] is None

    files = client.get("/api/files").get_json()
    assert [f["fileName"] for f in files] == ["norte.xlsx"]

    stats = client.get("/api/stats").get_json()
    assert stats["totalAuditorias"] == 1
    assert stats["totalItems"] == 4
    assert stats["porMes"]["2024-01"]["cumplimiento"] == 50.0


def test_upload_without_config(client, make_xlsx, checklist_rows):
    body = _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))]).get_json()

    assert body["accepted"] is False
    assert body["batchId"] is None
    assert "No hay configuración" in body["batch"]["outcomes"][0]["error"]
    assert client.get("/api/files").get_json() == []


def test_upload_partial_accept(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)

    body = _upload(client, [("norte.xlsx", make_xlsx(checklist_rows)), ("roto.xlsx", b"zzz")]).get_json()
    assert body["accepted"] is False
    assert body["batch"]["failed"] == 1
    batch_id = body["batchId"]
    assert batch_id

    # nada se agrega hasta aceptar
    assert client.get("/api/files").get_json() == []

    r = client.post(f"/api/uploads/{batch_id}/accept")
    assert r.get_json() == {"accepted": ["norte.xlsx"]}
    assert len(client.get("/api/files").get_json()) == 1

    assert client.post(f"/api/uploads/{batch_id}/accept").status_code == 404


def test_upload_partial_discard(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)

    body = _upload(client, [("norte.xlsx", make_xlsx(checklist_rows)), ("roto.xlsx", b"zzz")]).get_json()

    r = client.post(f"/api/uploads/{body['batchId']}/discard")
    assert r.status_code == 200
    assert r.get_json()["discarded"] == ["norte.xlsx", "roto.xlsx"]
    assert client.get("/api/files").get_json() == []


def test_reset_drops_pending_batches(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)

    body = _upload(client, [("norte.xlsx", make_xlsx(checklist_rows)), ("roto.xlsx", b"zzz")]).get_json()
    client.delete("/api/files")

    assert client.post(f"/api/uploads/{body['batchId']}/accept").status_code == 404
    assert client.get("/api/files").get_json() == []


def test_upload_duplicate_names(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    data = make_xlsx(checklist_rows)

    body = _upload(client, [("norte.xlsx", data), ("norte.xlsx", data)]).get_json()

    assert body["accepted"] is True
    assert len(client.get("/api/files").get_json()) == 1
    assert client.get("/api/stats").get_json()["totalItems"] == 4


def test_upload_without_files(client):
    assert client.post("/api/uploads", data={}).status_code == 400


def test_items_filters_and_categories(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    sur_rows = [list(r) for r in checklist_rows]
    sur_rows[0][0] = "Operación: Puerto Sur"
    _upload(client, [("norte.xlsx", make_xlsx(checklist_rows)), ("sur.xlsx", make_xlsx(sur_rows))])

    assert len(client.get("/api/items").get_json()) == 8
    items = client.get("/api/items?operacion=Puerto Sur").get_json()
    assert len(items) == 4
    assert {it["operacion"] for it in items} == {"Puerto Sur"}
    assert items[0]["fecha"] == "13/01/2024"

    stats = client.get("/api/stats?auditor=Nadie").get_json()
    assert stats["totalAuditorias"] == 0

    cats = client.get("/api/categories").get_json()
    assert [c["categoria"] for c in cats] == ["SEGURIDAD INDUSTRIAL", "ORDEN Y LIMPIEZA"]


def test_calendar(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))])

    cal = client.get("/api/calendar").get_json()
    assert cal["year"] == 2024
    assert cal["rows"][0]["meses"][0] == 50.0

    assert client.get("/api/calendar?year=2023").get_json()["rows"][0]["meses"][0] is None


def test_reparse_with_new_config(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))])

    # observación apuntando a otra columna
    cfg = checklist_config.to_dict()
    cfg["observacion"] = 0
    client.put("/api/config", json=cfg)

    r = client.post("/api/reparse")
    assert r.get_json()["replaced"] is True
    items = client.get("/api/items").get_json()
    assert items[0]["observacion"] == "1.1"


def test_reparse_empty_collection(client):
    assert client.post("/api/reparse").status_code == 400


def test_reparse_failure_keeps_collection(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))])
    client.delete("/api/config")

    body = client.post("/api/reparse").get_json()
    assert body["replaced"] is False
    assert len(client.get("/api/files").get_json()) == 1


def test_clear_files(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))])

    r = client.delete("/api/files")
    assert r.get_json() == {"status": "cleared", "removedBlobs": 1}
    assert client.get("/api/files").get_json() == []


def test_precheck_endpoint(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)

    body = _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))], field="file", url="/api/precheck").get_json()
    assert body["ok"] is True
    assert body["meta"]["parsed"]["operacion"] == "Puerto Central"

    assert client.post("/api/precheck", data={}).status_code == 400


def test_exports(client, make_xlsx, checklist_rows, checklist_config):
    _put_config(client, checklist_config)
    _upload(client, [("norte.xlsx", make_xlsx(checklist_rows))])

    r = client.get("/api/export/items.xlsx")
    assert r.status_code == 200
    assert "auditorias-consolidadas.xlsx" in r.headers["Content-Disposition"]
    r.close()

    r = client.get("/api/export/calendar.xlsx?year=2024")
    assert r.status_code == 200
    assert "calendario-cumplimiento-2024.xlsx" in r.headers["Content-Disposition"]
    r.close()
