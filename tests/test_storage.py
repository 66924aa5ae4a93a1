"""
Tests for the model cache and the last-session store.
"""
import json
from datetime import datetime, timedelta, timezone

import allure
import pytest

from cody_cli.history import SessionStore
from cody_cli.llm import ModelCache


@allure.feature("Model Cache")
@allure.story("Fresh cache round trip")
def test_cache_save_and_load(tmp_path):
    cache = ModelCache(tmp_path / "cache" / "models.json")
    assert cache.load() is None

    cache.save(["a/one", "b/two"])
    assert cache.load() == ["a/one", "b/two"]

    cache.clear()
    assert cache.load() is None
    cache.clear()


@allure.feature("Model Cache")
@allure.story("Stale entries expire")
@pytest.mark.parametrize("age_hours,fresh", [(1, True), (23, True), (25, False), (-2, False)])
def test_cache_ttl(tmp_path, age_hours, fresh):
    cache_file = tmp_path / "models.json"
    fetched = datetime.now(timezone.utc) - timedelta(hours=age_hours)
    cache_file.write_text(json.dumps({"models": ["m"], "timestamp": fetched.isoformat()}))

    assert (ModelCache(cache_file).load() == ["m"]) is fresh


@allure.feature("Model Cache")
@allure.story("Corrupt cache is ignored")
@pytest.mark.parametrize("content", [
    "{broken",
    "[]",
    json.dumps({"models": ["m"]}),
    json.dumps({"models": ["m"], "timestamp": "yesterday"}),
])
def test_cache_corrupt(tmp_path, content):
    cache_file = tmp_path / "models.json"
    cache_file.write_text(content)
    assert ModelCache(cache_file).load() is None


@allure.feature("Session Store")
@allure.story("Last project and model")
def test_session_store_round_trip(tmp_path):
    store = SessionStore(tmp_path / "history.json")
    assert store.load() is None

    written = store.save("/work/project", "vendor/model")
    loaded = store.load()

    assert loaded.last_project == "/work/project"
    assert loaded.last_model == "vendor/model"
    assert loaded.timestamp == pytest.approx(written.timestamp)


@allure.feature("Session Store")
@allure.story("Unreadable history is ignored")
@pytest.mark.parametrize("content", ["not json", "[]", json.dumps({"timestamp": "x"})])
def test_session_store_corrupt(tmp_path, content):
    history = tmp_path / "history.json"
    history.write_text(content)
    assert SessionStore(history).load() is None
