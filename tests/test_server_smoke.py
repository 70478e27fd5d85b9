from jot_search.highlight import span_open
from jot_search.server import SearchService
from jot_search.theme import DEFAULT_PALETTE, ThemeWatcher


def _service(tmp_path, **kwargs) -> SearchService:
    root = tmp_path / "Jot"
    root.mkdir()
    theme = ThemeWatcher(tmp_path / "alacritty.toml")
    return SearchService(root, theme, **kwargs)


def test_search_service_smoke(tmp_path):
    service = _service(tmp_path)

    saved = service.save_note("Shopping List", "buy milk and eggs")
    assert saved["ok"] and saved["filename"] == "shopping-list.md"
    (service.notes_dir / "ideas.txt").write_text("weekend plans", encoding="utf-8")

    listing = service.list_notes()
    assert listing["notes"] == ["ideas.txt", "shopping-list.md"]

    found = service.search("shop")
    assert found["ok"] and found["total"] == 1
    hit = found["results"][0]
    assert hit["filename"] == "shopping-list.md"
    assert hit["match_type"] == "filename"
    assert hit["filename_positions"] == [0, 1, 2, 3]
    assert hit["filename_markup"].startswith(span_open(DEFAULT_PALETTE.highlight))

    everything = service.search("")
    assert everything["total"] == 2
    assert all(result["score"] == 0 for result in everything["results"])
    assert all(result["match_type"] is None for result in everything["results"])

    assert service.search("xyz9")["results"] == []

    read = service.read_note("shopping-list")
    assert read["ok"] and read["title"] == "Shopping List"
    assert read["content"].strip() == "buy milk and eggs"

    missing = service.read_note("nope")
    assert not missing["ok"]


def test_search_truncates_to_limit(tmp_path):
    service = _service(tmp_path, max_results=2)
    for index in range(5):
        (service.notes_dir / f"note-{index}.md").write_text("same", encoding="utf-8")

    result = service.search("same")
    assert result["total"] == 5
    assert len(result["results"]) == 2
    assert len(service.search("same", limit=4)["results"]) == 4


def test_search_uses_current_palette(tmp_path):
    service = _service(tmp_path)
    (service.notes_dir / "alpha.md").write_text("", encoding="utf-8")
    (tmp_path / "alacritty.toml").write_text('[colors.normal]\nblue = "#123456"\n', encoding="utf-8")

    result = service.search("alpha")
    assert span_open("#123456") in result["results"][0]["filename_markup"]
    assert service.palette()["highlight"] == "#123456"


def test_read_note_rejects_escape(tmp_path):
    service = _service(tmp_path)
    result = service.read_note("../secrets")
    assert not result["ok"]
    assert "outside" in result["error"]


def test_save_and_update_note(tmp_path):
    service = _service(tmp_path)
    assert service.save_note("Shopping List", "milk")["ok"]

    duplicate = service.save_note("shopping list!", "eggs")
    assert not duplicate["ok"]
    assert "exists" in duplicate["error"]

    updated = service.update_note("shopping-list", "Shopping List", "milk and eggs")
    assert updated["ok"] and updated["filename"] == "shopping-list.md"
    assert service.read_note("shopping-list")["content"].strip() == "milk and eggs"
    assert service.list_notes()["notes"] == ["shopping-list.md"]

    missing = service.update_note("nope", None, "body")
    assert not missing["ok"]


def test_search_keeps_working_with_malformed_theme(tmp_path):
    service = _service(tmp_path)
    (service.notes_dir / "shopping-list.md").write_text("milk", encoding="utf-8")
    (tmp_path / "alacritty.toml").write_text(
        '[colors.normal]\nblue = "#123456"\n[[colors.normal]]\n', encoding="utf-8"
    )

    result = service.search("shop")
    assert result["ok"]
    assert span_open(DEFAULT_PALETTE.highlight) in result["results"][0]["filename_markup"]
