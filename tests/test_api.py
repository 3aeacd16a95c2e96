"""Tests for the HTTP API over a memory-backed storage service."""

import asyncio
import io
import zipfile

import pytest
from fastapi.testclient import TestClient

from src import config
from src.api.main import app
from src.archive.packager import MANIFEST_FILENAME
from src.persistence import storage as storage_module
from tests.factories import (
    build_zip,
    framework_data,
    make_collection,
    make_framework,
    make_prompt,
    prompt_file,
)


@pytest.fixture
def client(monkeypatch, memory_storage):
    monkeypatch.setattr(storage_module, "_storage", memory_storage)
    monkeypatch.setattr(config, "PLAN", "free")
    return TestClient(app)


def _seed(storage, collection):
    asyncio.run(storage.save_collection(collection))


def test_root_reports_schema_versions(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["schema_versions"] == {"framework": 2, "prompt": 2}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["prompts_loaded"] == 0


def test_export_returns_zip(client, memory_storage):
    fw = make_framework()
    prompt = make_prompt()
    _seed(memory_storage, make_collection([fw], [(prompt, 1, True)], fw.id))

    response = client.get("/v1/archive/export")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    names = zipfile.ZipFile(io.BytesIO(response.content)).namelist()
    assert f"framework-{fw.id}.md" in names
    assert f"{prompt.id}.md" in names


def test_diff_export_by_prompt_ids(client, memory_storage):
    p1, p2 = make_prompt(), make_prompt()
    _seed(memory_storage, make_collection([make_framework()], [(p1, 1, True), (p2, 2, True)]))

    response = client.get("/v1/archive/export", params={"prompt_ids": [p2.id]})

    names = set(zipfile.ZipFile(io.BytesIO(response.content)).namelist())
    assert names == {f"{p2.id}.md", MANIFEST_FILENAME}


def test_import_then_list(client):
    prompt = make_prompt()
    data = build_zip({f"{prompt.id}.md": prompt_file(prompt)})

    response = client.post("/v1/archive/import", content=data)

    assert response.status_code == 200
    assert response.json()["prompts_imported"] == 1
    listed = client.get("/v1/prompts").json()
    assert [p["id"] for p in listed] == [prompt.id]


def test_import_rejects_non_zip(client):
    response = client.post("/v1/archive/import", content=b"not a zip")
    assert response.status_code == 400
    assert "message" in response.json()["detail"]


def test_import_rejects_empty_body(client):
    assert client.post("/v1/archive/import", content=b"").status_code == 400


def test_import_over_quota_is_forbidden(client, memory_storage):
    prompts = [make_prompt() for _ in range(21)]
    data = build_zip({f"{p.id}.md": prompt_file(p) for p in prompts})

    response = client.post("/v1/archive/import", content=data)

    assert response.status_code == 403
    assert asyncio.run(memory_storage.get_collection()).prompts == []


def test_import_with_misconfigured_plan(client, monkeypatch):
    monkeypatch.setattr(config, "PLAN", "platinum")
    prompt = make_prompt()
    data = build_zip({f"{prompt.id}.md": prompt_file(prompt)})
    assert client.post("/v1/archive/import", content=data).status_code == 500


def test_diff_import_flag(client, memory_storage):
    existing = make_prompt()
    _seed(memory_storage, make_collection([], [(existing, 4, True)]))
    fresh = make_prompt()
    data = build_zip({f"{fresh.id}.md": prompt_file(fresh)})

    response = client.post("/v1/archive/import", params={"diff": "true"}, content=data)

    assert response.json()["mode"] == "diff"
    listed = client.get("/v1/prompts").json()
    assert [(p["id"], p["order"]) for p in listed] == [(existing.id, 4), (fresh.id, 5)]


def test_parse_framework_migrates_legacy_text(client):
    data = framework_data()
    del data["version"]
    text = "".join(f"{k}: {v}\n" for k, v in data.items())

    response = client.post("/v1/frameworks/parse", content=text)

    assert response.status_code == 200
    assert response.json()["document"]["version"] == 2
    assert response.json()["yaml"].startswith("version: 2\n")


def test_parse_framework_rejects_invalid(client):
    response = client.post("/v1/frameworks/parse", content="name: only a name\n")
    assert response.status_code == 422


def test_get_unknown_prompt_is_404(client):
    assert client.get("/v1/prompts/does-not-exist").status_code == 404


def test_get_framework_and_list_default(client, memory_storage):
    fw = make_framework()
    _seed(memory_storage, make_collection([fw], [], fw.id))

    assert client.get(f"/v1/frameworks/{fw.id}").json()["content"]["name"] == fw.name
    listed = client.get("/v1/frameworks").json()
    assert listed[0]["is_default"] is True


def test_render_prompt(client, memory_storage):
    prompt = make_prompt()
    _seed(memory_storage, make_collection([], [(prompt, 1, True)]))

    response = client.post(f"/v1/prompts/{prompt.id}/render", json={"variables": {}})

    assert response.status_code == 200
    body = response.json()
    assert body["text"] == "Summarize {{text}} in 3 bullets."
    assert body["missing_required"] == ["text"]
