"""FastMCP server exposing fuzzy search over a Jot notes directory."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar, cast

from dotenv import load_dotenv
from fastmcp import FastMCP
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .highlight import MAX_PREVIEW_SIZE, highlight_matches, preview_markup
from .notes import load_note, resolve_note_path, resolve_notes_dir, scan_notes
from .notes import save_note as write_note
from .notes import update_note as rewrite_note
from .ranker import MAX_SEARCH_RESULTS, SearchResult, limit_results
from .ranker import search_notes as rank_notes
from .security import HEALTH_PATH, build_security_middleware
from .theme import ThemeWatcher, default_theme_path

TToolFunc = TypeVar("TToolFunc", bound=Callable[..., Any])

logger = logging.getLogger(__name__)

load_dotenv()


@dataclass(slots=True)
class Settings:
    notes_dir: Path
    theme_path: Path
    host: str
    port: int
    shared_secret: str | None
    log_level: str
    max_results: int = MAX_SEARCH_RESULTS
    preview_size: int = MAX_PREVIEW_SIZE


@dataclass(slots=True)
class SearchService:
    """Search, read and save notes; every method returns an ``ok`` dict."""

    notes_dir: Path
    theme: ThemeWatcher
    max_results: int = MAX_SEARCH_RESULTS
    preview_size: int = MAX_PREVIEW_SIZE

    def _render(self, result: SearchResult, color: str) -> dict[str, Any]:
        note = result.document
        return {
            "filename": note.filename,
            "filepath": note.filepath,
            "score": result.combined_score,
            "match_type": result.match_type.value if result.match_type else None,
            "filename_positions": list(result.filename_positions),
            "content_positions": list(result.content_positions),
            "filename_markup": highlight_matches(note.filename, result.filename_positions, color),
            "preview_markup": preview_markup(
                note.content, result.content_positions, color, self.preview_size
            ),
        }

    def search(self, query: str, limit: int | None = None) -> dict[str, Any]:
        try:
            corpus = scan_notes(self.notes_dir)
            ranked = rank_notes(corpus, query)
            shown = limit_results(ranked, self.max_results if limit is None else limit)
            self.theme.poll()
            color = self.theme.palette.highlight
            logger.debug("Query %r matched %d of %d notes", query, len(ranked), len(corpus))
            return {
                "ok": True,
                "query": query,
                "total": len(ranked),
                "results": [self._render(result, color) for result in shown],
            }
        except Exception as exc:
            return {"ok": False, "error": str(exc)}

    def list_notes(self) -> dict[str, Any]:
        try:
            return {"ok": True, "notes": [note.filename for note in scan_notes(self.notes_dir)]}
        except Exception as exc:
            return {"ok": False, "error": str(exc)}

    def read_note(self, name: str) -> dict[str, Any]:
        try:
            target = resolve_note_path(name, self.notes_dir)
            if not target.exists():
                return {"ok": False, "error": "Note does not exist", "path": str(target)}
            parsed = load_note(target)
            return {
                "ok": True,
                "path": parsed.filepath,
                "filename": parsed.filename,
                "title": parsed.title,
                "content": parsed.content,
            }
        except Exception as exc:
            return {"ok": False, "error": str(exc)}

    def save_note(self, title: str | None, content: str, overwrite: bool = False) -> dict[str, Any]:
        try:
            target = write_note(self.notes_dir, title, content, overwrite=overwrite)
            return {"ok": True, "path": str(target), "filename": target.name}
        except FileExistsError:
            return {"ok": False, "error": "File already exists"}
        except Exception as exc:
            return {"ok": False, "error": str(exc)}

    def update_note(self, name: str, title: str | None, content: str) -> dict[str, Any]:
        try:
            target = rewrite_note(self.notes_dir, name, title, content)
            return {"ok": True, "path": str(target), "filename": target.name}
        except FileNotFoundError:
            return {"ok": False, "error": "Note does not exist"}
        except Exception as exc:
            return {"ok": False, "error": str(exc)}

    def palette(self) -> dict[str, Any]:
        try:
            self.theme.poll()
            palette = self.theme.palette
            return {"ok": True, "highlight": palette.highlight, "colors": palette.as_dict()}
        except Exception as exc:
            return {"ok": False, "error": str(exc)}


def load_settings() -> Settings:
    """Load configuration from environment variables."""

    notes_dir = resolve_notes_dir(os.environ.get("JOT_DIR"))
    raw_theme = os.environ.get("JOT_THEME_PATH")
    theme_path = Path(raw_theme).expanduser() if raw_theme else default_theme_path()

    host = os.environ.get("HOST", "0.0.0.0")  # noqa: S104 (intentional bind)
    port = int(os.environ.get("PORT", "8000"))
    shared_secret = os.environ.get("MCP_SHARED_SECRET")
    max_results = int(os.environ.get("JOT_MAX_RESULTS", str(MAX_SEARCH_RESULTS)))
    preview_size = int(os.environ.get("JOT_PREVIEW_SIZE", str(MAX_PREVIEW_SIZE)))

    log_level = os.environ.get("LOG_LEVEL", "info").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))

    return Settings(
        notes_dir=notes_dir,
        theme_path=theme_path,
        host=host,
        port=port,
        shared_secret=shared_secret,
        log_level=log_level,
        max_results=max_results,
        preview_size=preview_size,
    )


def create_server(settings: Settings | None = None) -> tuple[FastMCP, list[Middleware]]:
    """Create a configured :class:`FastMCP` instance and its security middleware."""

    settings = settings or load_settings()
    server = FastMCP(
        "Jot Search",
        instructions="Fuzzy search over Jot notes with highlighted matches",
    )

    security_middleware = build_security_middleware(settings.shared_secret)

    theme = ThemeWatcher(settings.theme_path)
    theme.subscribe(lambda palette: logger.info("Palette changed, highlight %s", palette.highlight))
    service = SearchService(
        settings.notes_dir,
        theme,
        max_results=settings.max_results,
        preview_size=settings.preview_size,
    )

    def tool(*args: Any, **kwargs: Any) -> Callable[[TToolFunc], TToolFunc]:
        decorator = server.tool(*args, **kwargs)
        return cast(Callable[[TToolFunc], TToolFunc], decorator)

    @tool()
    async def search_notes(query: str, limit: int | None = None) -> dict[str, Any]:
        return service.search(query, limit)

    @tool()
    async def list_notes() -> dict[str, Any]:
        return service.list_notes()

    @tool()
    async def read_note(name: str) -> dict[str, Any]:
        return service.read_note(name)

    @tool()
    async def save_note(
        content: str, title: str | None = None, overwrite: bool = False
    ) -> dict[str, Any]:
        return service.save_note(title, content, overwrite)

    @tool()
    async def update_note(name: str, content: str, title: str | None = None) -> dict[str, Any]:
        return service.update_note(name, title, content)

    @tool()
    async def theme_palette() -> dict[str, Any]:
        return service.palette()

    @server.custom_route(HEALTH_PATH, methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return cast(FastMCP, server), security_middleware


def main() -> None:
    """Run the FastMCP server."""

    settings = load_settings()
    server, security_middleware = create_server(settings)
    server.run(
        transport="http",
        host=settings.host,
        port=settings.port,
        middleware=security_middleware,
    )


if __name__ == "__main__":
    main()
