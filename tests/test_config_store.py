# tests/test_config_store.py

import json

import pytest

from tablero_auditorias.parsers.column_config import CellRef, ColumnConfig, validate_config
from tablero_auditorias.parsers.errors import ConfigurationError
from tablero_auditorias.services.config_store import (
    CONFIG_STORAGE_KEY,
    ColumnConfigStore,
    MemoryKeyValueStore,
    database_config_store,
)


def test_to_dict_from_dict_keys():
    config = ColumnConfig(
        pregunta=1,
        cumple=2,
        cumple_parcial=3,
        no_cumple=4,
        no_aplica=5,
        header_row_index=3,
        cumplimiento_cell=CellRef(7, 2),
        fecha_cell=CellRef(0, 5),
    )
    d = config.to_dict()

    assert d["cumpleParcial"] == 3
    assert d["headerRowIndex"] == 3
    assert d["cumplimientoRow"] == 7
    assert d["cumplimientoCol"] == 2
    assert d["fechaCell"] == {"row": 0, "col": 5}
    assert d["operacionCell"] is None
    assert ColumnConfig.from_dict(d) == config


def test_from_dict_lenient_values():
    config = ColumnConfig.from_dict({
        "pregunta": "1",
        "cumple": 2.0,
        "fechaCell": {"row": -1, "col": 3},
        "columnaLegada": "x",
    })
    assert config.pregunta == 1
    assert config.cumple == 2
    assert config.fecha_cell is None
    assert config.extra == {"columnaLegada": "x"}
    assert config.to_dict()["columnaLegada"] == "x"


@pytest.mark.parametrize("payload", [None, [], {"pregunta": "uno"}, {"cumple": True}, {"fechaCell": 5}])
def test_from_dict_invalid(payload):
    with pytest.raises(ConfigurationError):
        ColumnConfig.from_dict(payload)


def test_validate_config_messages():
    assert validate_config(None) == [
        "No hay configuración de Excel guardada. Por favor, configura las columnas y campos primero."
    ]
    errors = validate_config(ColumnConfig(pregunta=1))
    assert "La columna 'Cumple' no está configurada" in errors
    assert "La fila de encabezado no está configurada" in errors
    assert len(errors) == 5


def test_memory_store_round_trip(checklist_config):
    store = ColumnConfigStore(MemoryKeyValueStore())
    assert store.load() is None

    store.save(checklist_config)
    assert store.load() == checklist_config

    store.clear()
    assert store.load() is None


@pytest.mark.parametrize("blob", ["{no es json", json.dumps({"pregunta": "abc"}), json.dumps([1, 2])])
def test_malformed_blob_is_no_config(blob):
    store = ColumnConfigStore(MemoryKeyValueStore({CONFIG_STORAGE_KEY: blob}))
    assert store.load() is None


def test_database_store(app, checklist_config):
    with app.app_context():
        store = database_config_store()
        assert store.load() is None

        store.save(checklist_config)
        assert database_config_store().load() == checklist_config

        store.save(ColumnConfig(pregunta=9))
        assert database_config_store().load().pregunta == 9

        store.clear()
        assert database_config_store().load() is None
