"""Tests for the command line interface."""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from notion_toon import __main__ as cli
from notion_toon.models import Block, Page
from notion_toon.notion import NotionApiError, NotionClient, PageData

PAGE_ID = "12345678-1234-1234-1234-123456789abc"

PAGE_DUMP = {
    "page": {
        "id": PAGE_ID,
        "created_time": "2024-01-01T00:00:00.000Z",
        "last_edited_time": "2024-01-02T00:00:00.000Z",
        "properties": {"Name": {"type": "title", "title": [{"plain_text": "Dump"}]}},
    },
    "blocks": [
        {
            "id": "b1",
            "type": "heading_1",
            "heading_1": {"rich_text": [{"plain_text": "Intro"}]},
            "children": [{"id": "b2", "type": "paragraph", "paragraph": {"rich_text": [{"plain_text": "Text"}]}}],
        },
    ],
}

EXPECTED = (
    "meta:\n"
    f"  id: {PAGE_ID}\n"
    "  created: 2024-01-01T00:00:00.000Z\n"
    "  updated: 2024-01-02T00:00:00.000Z\n"
    "  title: Dump\n"
    "content:\n"
    "  h1: Intro\n"
    "    p: Text"
)


@pytest.fixture
def dump_file(tmp_path):
    path = tmp_path / "page.json"
    path.write_text(json.dumps(PAGE_DUMP), encoding="utf-8")
    return path


@pytest.fixture
def fake_fetch(monkeypatch):
    """Replace the network layer with a canned page."""
    calls = []

    def fetch(client, page_id):
        calls.append(page_id)
        page = Page.from_api(PAGE_DUMP["page"])
        blocks = tuple(Block.from_api(b) for b in PAGE_DUMP["blocks"])
        return PageData(page=page, blocks=blocks)

    monkeypatch.setenv("NOTION_TOKEN", "secret")
    monkeypatch.setattr(cli, "fetch_page_with_blocks", fetch)
    return calls


def test_convert_json_prints_toon(dump_file, capsys):
    cli.main(["convert-json", str(dump_file)])
    assert capsys.readouterr().out == EXPECTED + "\n"


def test_convert_json_to_file(dump_file, tmp_path):
    output = tmp_path / "out" / "page.toon"
    cli.main(["convert-json", str(dump_file), "-o", str(output)])
    assert output.read_text(encoding="utf-8") == EXPECTED


def test_convert_json_bad_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert-json", str(path)])
    assert excinfo.value.code == 1


def test_convert_fetches_by_url(fake_fetch, capsys):
    cli.main(["convert", f"https://www.notion.so/ws/Dump-{PAGE_ID.replace('-', '')}"])
    assert fake_fetch == [PAGE_ID]
    assert capsys.readouterr().out == EXPECTED + "\n"


def test_convert_output_dir(fake_fetch, tmp_path):
    cli.main(["convert", PAGE_ID, "-d", str(tmp_path)])
    assert (tmp_path / "Dump.toon").read_text(encoding="utf-8") == EXPECTED


def test_convert_uses_config_output_dir(fake_fetch, tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(f"output_dir: {tmp_path / 'exports'}\n")
    cli.main(["--config", str(config), "convert", PAGE_ID])
    assert (tmp_path / "exports" / "Dump.toon").exists()


def test_convert_rejects_bad_source(fake_fetch):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert", "https://example.com/page"])
    assert excinfo.value.code == 1
    assert fake_fetch == []


def test_convert_missing_token(monkeypatch):
    monkeypatch.delenv("NOTION_TOKEN", raising=False)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert", PAGE_ID])
    assert excinfo.value.code == 1


def test_convert_api_error(monkeypatch):
    def fetch(client, page_id):
        raise NotionApiError("Could not find page", 404, "object_not_found")

    monkeypatch.setenv("NOTION_TOKEN", "secret")
    monkeypatch.setattr(cli, "fetch_page_with_blocks", fetch)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert", PAGE_ID])
    assert excinfo.value.code == 1


def test_page_id(capsys):
    cli.main(["page-id", PAGE_ID.replace("-", "").upper()])
    assert capsys.readouterr().out.strip() == PAGE_ID


def test_bad_config_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path / "missing.yaml"), "page-id", PAGE_ID])
    assert excinfo.value.code == 1


def test_test_connection(monkeypatch, capsys):
    class FakeClient:
        def get_current_user(self):
            return {"id": "bot-1", "name": "Exporter"}

    monkeypatch.setattr(cli, "build_client", lambda config: FakeClient())
    cli.main(["test-connection"])
    assert capsys.readouterr().out.strip() == "Connected as Exporter"


@pytest.mark.parametrize("blocks", [
    {"id": "b1"},
    ["not a block"],
    [{"type": "toggle", "children": {"id": "b2"}}],
    [{"type": "toggle", "children": [{"type": "paragraph"}, 5]}],
])
def test_convert_json_malformed_blocks(tmp_path, caplog, blocks):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"page": PAGE_DUMP["page"], "blocks": blocks}), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert-json", str(path)])
    assert excinfo.value.code == 1
    assert "Cannot read page dump" in caplog.text


def test_convert_json_without_blocks(tmp_path, capsys):
    path = tmp_path / "page.json"
    path.write_text(json.dumps({"page": PAGE_DUMP["page"], "blocks": None}), encoding="utf-8")
    cli.main(["convert-json", str(path)])
    assert "content:" not in capsys.readouterr().out


def test_convert_non_notion_url_message(fake_fetch, caplog):
    with pytest.raises(SystemExit):
        cli.main(["convert", f"https://example.com/{PAGE_ID}"])
    assert "is not a Notion URL" in caplog.text
    assert fake_fetch == []


def test_convert_notion_url_without_id_message(fake_fetch, caplog):
    with pytest.raises(SystemExit):
        cli.main(["convert", "https://www.notion.so/workspace/Just-A-Title"])
    assert "Could not extract a page ID" in caplog.text
    assert "is not a Notion URL" not in caplog.text


def test_convert_offline_exits_cleanly(monkeypatch, caplog):
    sdk = MagicMock()
    sdk.pages.retrieve.side_effect = httpx.ConnectError("connection refused")
    sdk.blocks.children.list.side_effect = httpx.ConnectError("connection refused")
    client = NotionClient("token", client=sdk)

    monkeypatch.setattr(cli, "build_client", lambda config: client)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["convert", PAGE_ID])
    assert excinfo.value.code == 1
    assert "Network error" in caplog.text
