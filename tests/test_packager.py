"""Tests for archive export and import-side file discovery."""

import io
import json
import zipfile

import pytest

from src.archive.frontmatter import from_text
from src.archive.packager import (
    MANIFEST_FILENAME,
    enumeration_order,
    export_archive,
    find_framework_files,
    find_prompt_files,
    framework_id_from_name,
    open_archive,
    prompt_id_from_name,
    read_manifest,
)
from src.dsl.errors import ImportFormatError
from tests.factories import build_zip, make_collection, make_framework, make_prompt, new_id


def _open(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def test_full_export_layout():
    fw = make_framework()
    p1, p2 = make_prompt(), make_prompt(name="Second")
    collection = make_collection([fw], [(p1, 5, True), (p2, 2, False)])

    zf = _open(export_archive(collection))
    names = set(zf.namelist())
    assert names == {
        f"framework-{fw.id}.md",
        f"{p1.id}.md",
        f"{p2.id}.md",
        MANIFEST_FILENAME,
    }

    manifest = json.loads(zf.read(MANIFEST_FILENAME))
    assert manifest == [
        {"id": p1.id, "order": 5, "shared": True},
        {"id": p2.id, "order": 2, "shared": False},
    ]

    fw_file = from_text(zf.read(f"framework-{fw.id}.md").decode())
    assert fw_file.body == fw.content
    assert fw_file.data["id"] == fw.id


def test_diff_export_skips_frameworks_and_renumbers():
    fw = make_framework()
    p1, p2, p3 = make_prompt(), make_prompt(), make_prompt()
    collection = make_collection([fw], [(p1, 30, True), (p2, 10, False), (p3, 20, True)])

    zf = _open(export_archive(collection, prompt_ids=[p1.id, p2.id]))
    assert set(zf.namelist()) == {f"{p1.id}.md", f"{p2.id}.md", MANIFEST_FILENAME}
    manifest = json.loads(zf.read(MANIFEST_FILENAME))
    assert manifest == [
        {"id": p2.id, "order": 1, "shared": False},
        {"id": p1.id, "order": 2, "shared": True},
    ]


def test_diff_export_with_empty_subset_has_only_manifest():
    collection = make_collection([make_framework()], [(make_prompt(), 1, True)])
    zf = _open(export_archive(collection, prompt_ids=[]))
    assert zf.namelist() == [MANIFEST_FILENAME]
    assert json.loads(zf.read(MANIFEST_FILENAME)) == []


def test_export_is_deterministic_in_content():
    collection = make_collection([make_framework()], [(make_prompt(), 1, True)])
    first = _open(export_archive(collection))
    second = _open(export_archive(collection))
    for name in first.namelist():
        assert first.read(name) == second.read(name)


def test_file_name_patterns():
    uid = new_id()
    assert framework_id_from_name(f"framework-{uid}.md") == uid
    assert framework_id_from_name(f"nested/dir/framework-{uid}.md") == uid
    assert framework_id_from_name("framework-not-a-uuid.md") is None

    assert prompt_id_from_name(f"{uid}.md") == uid
    assert prompt_id_from_name(f"prompt-{uid}.md") == uid
    assert prompt_id_from_name(f"sub/{uid}.MD") == uid
    assert prompt_id_from_name(f"framework-{uid}.md") is None
    assert prompt_id_from_name("README.md") is None
    assert prompt_id_from_name(f"{uid}.txt") is None


def test_discovery_ignores_directories_and_unknown_files():
    fw_id, p_id = new_id(), new_id()
    data = build_zip({
        "docs/": "",
        f"docs/framework-{fw_id}.md": "x",
        f"prompts/{p_id}.md": "y",
        "notes.md": "z",
        MANIFEST_FILENAME: "[]",
    })
    zf = open_archive(data)
    assert find_framework_files(zf) == [f"docs/framework-{fw_id}.md"]
    assert find_prompt_files(zf) == [f"prompts/{p_id}.md"]


def test_enumeration_order_is_descending_natural():
    names = ["a2.md", "a10.md", "a1.md", "B3.md"]
    assert enumeration_order(names) == ["B3.md", "a10.md", "a2.md", "a1.md"]


def test_open_archive_rejects_non_zip():
    with pytest.raises(ImportFormatError):
        open_archive(b"definitely not a zip")


def test_read_manifest_absent():
    assert read_manifest(open_archive(build_zip({"x.txt": "1"}))) is None


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"id": "x"}',
        '[{"order": 1}]',
        '[{"id": "x", "order": "first"}]',
    ],
)
def test_read_manifest_invalid_is_treated_as_absent(content):
    assert read_manifest(open_archive(build_zip({MANIFEST_FILENAME: content}))) is None


def test_read_manifest_entries():
    uid = new_id()
    zf = open_archive(build_zip({MANIFEST_FILENAME: f'[{{"id": "{uid}", "order": 4}}]'}))
    entries = read_manifest(zf)
    assert len(entries) == 1
    assert entries[0].id == uid
    assert entries[0].order == 4
    assert entries[0].shared is True
