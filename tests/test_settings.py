import sqlite3

import pytest

from zxplorer.settings import EditorSettings, SettingsStore


@pytest.fixture
def store(tmp_path):
    s = SettingsStore(tmp_path / "settings.db")
    yield s
    s.close()


def test_missing_keys_use_defaults(store):
    settings = EditorSettings.load(store)
    assert settings == EditorSettings()
    assert store.get_setting("nope", 7) == 7


def test_round_trip(store):
    settings = EditorSettings(grid_size=0.25, show_grid=False, default_vertex_type=2)
    settings.save(store)
    loaded = EditorSettings.load(store)
    assert loaded == settings


def test_values_survive_reopening(tmp_path):
    path = tmp_path / "settings.db"
    first = SettingsStore(path)
    first.set_setting("snap_to_grid", False)
    first.close()

    second = SettingsStore(path)
    assert second.get_setting("snap_to_grid") is False
    second.close()


def test_bad_values_keep_defaults(store):
    store.set_setting("grid_size", "big")
    store.set_setting("show_grid", 3)
    store.set_setting("scale", True)
    settings = EditorSettings.load(store)
    assert settings.grid_size == 0.5
    assert settings.show_grid is True
    assert settings.scale == 80.0


def test_int_is_accepted_for_float(store):
    store.set_setting("scale", 100)
    settings = EditorSettings.load(store)
    assert settings.scale == 100.0
    assert isinstance(settings.scale, float)


def test_numbers_survive_reopening(tmp_path):
    path = tmp_path / "settings.db"
    first = SettingsStore(path)
    first.set_setting("grid_size", 0.25)
    first.set_setting("default_vertex_type", 2)
    first.close()

    second = SettingsStore(path)
    settings = EditorSettings.load(second)
    second.close()
    assert settings.grid_size == 0.25
    assert settings.default_vertex_type == 2


def test_numeric_column_from_older_database(tmp_path):
    path = tmp_path / "settings.db"
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE settings (key TEXT PRIMARY KEY, value JSON)")
    conn.execute("INSERT INTO settings (key, value) VALUES (?, ?)", ("grid_size", "0.25"))
    conn.execute("INSERT INTO settings (key, value) VALUES (?, ?)", ("history_limit", "20"))
    conn.commit()
    conn.close()

    store = SettingsStore(path)
    assert store.get_setting("grid_size") == 0.25
    settings = EditorSettings.load(store)
    store.close()
    assert settings.grid_size == 0.25
    assert settings.history_limit == 20
