import re

from fastapi.testclient import TestClient

from conftest import PPTX_MIME, slide_titles
from deckmerge.api import merge as merge_api
from deckmerge.core.config import get_settings
from deckmerge.main import app, sync_web_assets

client = TestClient(app)


def _part(path):
    return ("files", (path.name, path.read_bytes(), PPTX_MIME))


def test_merge_returns_download_url_and_ordered_deck(make_deck, tmp_path):
    a = make_deck("A.pptx", ["A1", "A2", "A3"])
    b = make_deck("B.pptx", ["B1", "B2"])

    response = client.post("/merge", files=[_part(a), _part(b)])

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert re.fullmatch(r"/output/merged_\d+\.pptx", data["downloadUrl"])

    download = client.get(data["downloadUrl"])
    assert download.status_code == 200
    merged = tmp_path / "downloaded.pptx"
    merged.write_bytes(download.content)
    assert slide_titles(merged) == ["A1", "A2", "A3", "B1", "B2"]


def test_merge_leaves_no_working_files(make_deck):
    a = make_deck("A.pptx", ["A1"])
    b = make_deck("B.pptx", ["B1"])

    response = client.post("/merge", files=[_part(a), _part(b)])

    assert response.status_code == 200
    assert list(get_settings().upload_dir.iterdir()) == []


def test_empty_upload_is_a_client_error():
    before = set(get_settings().output_dir.iterdir())

    response = client.post("/merge")

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "No files uploaded."
    assert set(get_settings().output_dir.iterdir()) == before


def test_corrupted_deck_is_a_server_error(make_deck, tmp_path):
    a = make_deck("A.pptx", ["A1"])
    broken = tmp_path / "broken.pptx"
    broken.write_bytes(b"not a zip at all")
    before = set(get_settings().output_dir.iterdir())

    response = client.post("/merge", files=[_part(a), _part(broken)])

    assert response.status_code == 500
    data = response.json()
    assert data == {"error": "Merge failed."}
    assert "downloadUrl" not in data
    assert set(get_settings().output_dir.iterdir()) == before
    assert list(get_settings().upload_dir.iterdir()) == []


def test_unexpected_failure_is_not_leaked_to_client(make_deck, monkeypatch):
    a = make_deck("A.pptx", ["A1"])

    def explode(*args, **kwargs):
        raise RuntimeError("secret internal detail")

    monkeypatch.setattr(merge_api.merge_service, "run", explode)

    response = client.post("/merge", files=[_part(a)])

    assert response.status_code == 500
    assert "secret" not in response.text


def test_outputs_listing_includes_merged_deck(make_deck):
    a = make_deck("A.pptx", ["A1"])
    url = client.post("/merge", files=[_part(a)]).json()["downloadUrl"]

    response = client.get("/outputs")

    assert response.status_code == 200
    listed = {item["download_url"]: item for item in response.json()["files"]}
    assert url in listed
    assert listed[url]["size_bytes"] > 0


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_upload_page_is_served():
    response = client.get("/")
    assert response.status_code == 200
    assert "file-input" in response.text

    script = client.get("/script.js")
    assert script.status_code == 200
    assert "/merge" in script.text


def test_public_root_serves_page_and_extra_files():
    public_dir = get_settings().public_dir
    assert (public_dir / "index.html").exists()

    (public_dir / "robots.txt").write_text("User-agent: *\n")
    response = client.get("/robots.txt")

    assert response.status_code == 200
    assert response.text == "User-agent: *\n"


def test_existing_public_files_are_not_overwritten(tmp_path):
    source = tmp_path / "web"
    public = tmp_path / "public"
    source.mkdir()
    public.mkdir()
    (source / "index.html").write_text("bundled")
    (source / "script.js").write_text("bundled")
    (public / "index.html").write_text("customised")

    copied = sync_web_assets(source, public)

    assert copied == [public / "script.js"]
    assert (public / "index.html").read_text() == "customised"
