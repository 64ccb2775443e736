"""Tests for YAML hologram storage."""

import pytest
import yaml

from holo_server.core.persistence import YamlHologramPersistence
from holo_server.core.types import Location
from holo_server.errors import PersistenceReadError, PersistenceWriteError


@pytest.mark.unit
def test_missing_file_is_empty(persistence):
    assert persistence.load_all() == []


@pytest.mark.unit
def test_save_is_staged_until_flush(persistence, storage_path, spawn):
    persistence.save("a", "&aHi", spawn)
    assert not storage_path.exists()

    persistence.flush()
    assert storage_path.exists()


@pytest.mark.unit
def test_round_trip_layout(persistence, storage_path, spawn):
    persistence.save("a", "<gradient:#FF0000:#0000FF>Hi</gradient>", spawn)
    persistence.flush()

    data = yaml.safe_load(storage_path.read_text(encoding="utf-8"))
    assert data == {
        "a": {
            "world": "world",
            "x": 10.5,
            "y": 64.0,
            "z": -3.25,
            "message": "<gradient:#FF0000:#0000FF>Hi</gradient>",
        }
    }

    reread = YamlHologramPersistence(storage_path).load_all()
    assert reread == [("a", "<gradient:#FF0000:#0000FF>Hi</gradient>", spawn)]


@pytest.mark.unit
def test_remove_then_flush(persistence, storage_path, spawn):
    persistence.save("a", "one", spawn)
    persistence.save("b", "two", spawn)
    persistence.flush()

    persistence.remove("a")
    persistence.remove("missing")
    persistence.flush()

    assert [entry[0] for entry in YamlHologramPersistence(storage_path).load_all()] == ["b"]


@pytest.mark.unit
def test_load_discards_staged_changes(persistence, spawn):
    persistence.save("a", "one", spawn)
    persistence.flush()
    persistence.save("b", "unflushed", spawn)

    assert [entry[0] for entry in persistence.load_all()] == ["a"]


@pytest.mark.unit
def test_invalid_entries_are_skipped(storage_path, caplog):
    storage_path.write_text(
        yaml.safe_dump(
            {
                "ok": {"world": "world", "x": 1, "y": 2, "z": 3, "message": "hi"},
                "no_world": {"x": 1, "y": 2, "z": 3, "message": "hi"},
                "no_message": {"world": "world", "x": 1, "y": 2, "z": 3},
                "bad_coords": {"world": "world", "x": "left", "y": 2, "z": 3, "message": "hi"},
                "not_a_mapping": "oops",
            }
        ),
        encoding="utf-8",
    )

    loaded = YamlHologramPersistence(storage_path).load_all()

    assert loaded == [("ok", "hi", Location("world", 1.0, 2.0, 3.0))]
    assert "no_world" in caplog.text
    assert "bad_coords" in caplog.text


@pytest.mark.unit
def test_numeric_ids_are_strings(storage_path):
    storage_path.write_text("123:\n  world: world\n  message: hi\n", encoding="utf-8")
    loaded = YamlHologramPersistence(storage_path).load_all()
    assert loaded[0][0] == "123"


@pytest.mark.unit
def test_malformed_yaml_raises_read_error(storage_path):
    storage_path.write_text("a: [unclosed\n", encoding="utf-8")
    with pytest.raises(PersistenceReadError) as excinfo:
        YamlHologramPersistence(storage_path).load_all()
    assert excinfo.value.context.operation == "holograms.load_all"


@pytest.mark.unit
def test_non_mapping_root_raises_read_error(storage_path):
    storage_path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(PersistenceReadError):
        YamlHologramPersistence(storage_path).load_all()


@pytest.mark.unit
def test_unwritable_location_raises_write_error(tmp_path, spawn):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    persistence = YamlHologramPersistence(blocker / "holograms.yml")
    persistence.save("a", "hi", spawn)

    with pytest.raises(PersistenceWriteError) as excinfo:
        persistence.flush()
    assert excinfo.value.context.operation == "holograms.flush"
    assert isinstance(excinfo.value.cause, OSError)


@pytest.mark.unit
def test_flush_leaves_no_temp_files(persistence, storage_path, spawn):
    persistence.save("a", "hi", spawn)
    persistence.flush()
    assert [p.name for p in storage_path.parent.iterdir()] == ["holograms.yml"]


@pytest.mark.unit
@pytest.mark.parametrize("first_call", ["save", "remove", "flush"])
def test_writes_before_load_keep_stored_entries(storage_path, spawn, first_call):
    seed = YamlHologramPersistence(storage_path)
    seed.save("old", "stored", spawn)
    seed.flush()

    fresh = YamlHologramPersistence(storage_path)
    if first_call == "save":
        fresh.save("new", "added", spawn)
    elif first_call == "remove":
        fresh.remove("missing")
    fresh.flush()

    ids = [entry[0] for entry in YamlHologramPersistence(storage_path).load_all()]
    assert "old" in ids


@pytest.mark.unit
def test_save_before_load_reports_unreadable_file(storage_path, spawn):
    storage_path.write_text("a: [unclosed\n", encoding="utf-8")
    with pytest.raises(PersistenceReadError):
        YamlHologramPersistence(storage_path).save("a", "hi", spawn)


@pytest.mark.unit
def test_non_mapping_entries_are_logged(storage_path, caplog):
    storage_path.write_text(
        "ok:\n  world: world\n  message: hi\nscalar: oops\n", encoding="utf-8"
    )

    loaded = YamlHologramPersistence(storage_path).load_all()

    assert [entry[0] for entry in loaded] == ["ok"]
    assert "Dropping hologram scalar" in caplog.text
