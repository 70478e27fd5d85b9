"""Reading, writing and scanning notes in the notes directory."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

NOTE_EXTENSIONS = (".md", ".txt")
MAX_FILENAME_LENGTH = 50
CREATED_PREFIX = "*Created:"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


@dataclass(frozen=True)
class Note:
    """A note file as seen by the search engine."""

    filename: str
    filepath: str
    content: str


@dataclass(frozen=True)
class ParsedNote:
    title: str
    content: str
    filepath: str
    filename: str


class NotesDirectoryError(ValueError):
    """Raised when the notes directory configuration is invalid."""


def default_notes_dir() -> Path:
    return Path.home() / "Documents" / "Jot"


def resolve_notes_dir(raw: str | None) -> Path:
    """Turn a configured notes directory into an absolute path."""

    if not raw or not raw.strip():
        return default_notes_dir()
    path = Path(raw.strip()).expanduser()
    if not path.is_absolute():
        raise NotesDirectoryError(f"Notes directory must be absolute: {raw!r}")
    return path.resolve(strict=False)


def ensure_in_notes_dir(path: Path, root: Path) -> Path:
    """Ensure *path* is inside the notes directory *root*."""

    resolved = path.resolve(strict=False)
    try:
        resolved.relative_to(root.resolve(strict=False))
    except ValueError:
        raise PermissionError(f"Path {resolved} is outside the notes directory") from None
    return resolved


def resolve_note_path(name: str, root: Path) -> Path:
    """Resolve a note name relative to *root*, adding ``.md`` when needed."""

    raw = Path(name)
    if not raw.parts:
        raise ValueError("Empty path provided")
    target = raw if raw.is_absolute() else root / raw
    if not target.suffix:
        target = target.with_suffix(".md")
    return ensure_in_notes_dir(target, root)


def scan_notes(root: Path, extensions: Iterable[str] = NOTE_EXTENSIONS) -> list[Note]:
    """Read every note file directly inside *root*.

    Files that cannot be read are skipped, and so is a missing directory.
    Notes are returned sorted by filename.
    """

    allowed = tuple(extensions)
    try:
        entries = sorted(root.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Error scanning notes directory %s: %s", root, exc)
        return []

    notes: list[Note] = []
    for entry in entries:
        if not entry.name.endswith(allowed) or not entry.is_file():
            continue
        try:
            content = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading note %s: %s", entry.name, exc)
            continue
        notes.append(Note(filename=entry.name, filepath=str(entry), content=content))
    return notes


def normalize_filename(title: str) -> str:
    normalized = _WHITESPACE.sub("-", title.strip())
    normalized = _UNSAFE_FILENAME_CHARS.sub("", normalized).lower()
    return normalized[:MAX_FILENAME_LENGTH]


def generate_filename(title: str | None, now: datetime | None = None) -> str:
    """Derive a note filename from *title*, or from the time when it has none."""

    if title:
        normalized = normalize_filename(title)
        if normalized:
            return f"{normalized}.md"
    now = now or datetime.now()
    return f"jot-{now:%Y%m%d-%H%M%S}.md"


def render_note(title: str | None, content: str, now: datetime | None = None) -> str:
    now = now or datetime.now()
    header = f"# {title}\n\n" if title else ""
    return f"{header}{CREATED_PREFIX} {now:%Y-%m-%d %H:%M:%S}*\n\n{content}\n"


def parse_note(text: str, path: Path) -> ParsedNote:
    """Split a note file into its title and body.

    The title line and the creation timestamp that follows it are dropped
    from the body, along with the blank lines around them. Files without a
    ``# `` title line are returned whole.
    """

    lines = text.split("\n")
    title = ""
    start = 0

    if lines[0].startswith("# "):
        title = lines[0][2:].strip()
        start = _skip_blank(lines, 1)
        if start < len(lines) and lines[start].startswith(CREATED_PREFIX):
            start = _skip_blank(lines, start + 1)

    return ParsedNote(
        title=title,
        content="\n".join(lines[start:]),
        filepath=str(path),
        filename=path.name,
    )


def _skip_blank(lines: list[str], index: int) -> int:
    while index < len(lines) and not lines[index].strip():
        index += 1
    return index


def load_note(path: Path) -> ParsedNote:
    return parse_note(path.read_text(encoding="utf-8"), path)


def save_note(
    root: Path,
    title: str | None,
    content: str,
    now: datetime | None = None,
    overwrite: bool = False,
) -> Path:
    """Write a new note into *root* and return its path.

    Raises :class:`FileExistsError` when the generated filename is taken,
    unless *overwrite* is set.
    """

    now = now or datetime.now()
    root.mkdir(parents=True, exist_ok=True)
    target = ensure_in_notes_dir(root / generate_filename(title, now), root)
    if target.exists() and not overwrite:
        raise FileExistsError(f"Note already exists: {target.name}")
    target.write_text(render_note(title, content, now), encoding="utf-8")
    logger.info("Note saved to %s", target)
    return target


def update_note(
    root: Path, name: str, title: str | None, content: str, now: datetime | None = None
) -> Path:
    """Rewrite an existing note in place, keeping its filename."""

    target = resolve_note_path(name, root)
    if not target.is_file():
        raise FileNotFoundError(f"Note does not exist: {target.name}")
    target.write_text(render_note(title, content, now), encoding="utf-8")
    logger.info("Note updated at %s", target)
    return target
