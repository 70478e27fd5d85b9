"""Color palette loading from Alacritty themes, with change notification."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

import toml
import yaml

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")
COLOR_SECTIONS = ("primary", "normal", "cursor")

PaletteListener = Callable[["Palette"], None]


@dataclass(frozen=True)
class Palette:
    background: str = "#0d1117"
    foreground: str = "#e6edf3"
    cursor: str = "#e6edf3"
    black: str = "#0d1117"
    red: str = "#ff7b72"
    green: str = "#3fb950"
    yellow: str = "#d29922"
    blue: str = "#58a6ff"
    magenta: str = "#bc8cff"
    cyan: str = "#39c5cf"
    white: str = "#e6edf3"

    @property
    def highlight(self) -> str:
        """Color used for search match highlighting."""
        return self.blue

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


DEFAULT_PALETTE = Palette()
_SLOTS = {field.name for field in fields(Palette)}


def default_theme_path() -> Path:
    return Path.home() / ".config" / "omarchy" / "current" / "theme" / "alacritty.toml"


def _normalize_color(value: Any) -> str | None:
    # Unquoted 0xRRGGBB in YAML loads as an int.
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 0xFFFFFF:
        return f"#{value:06x}"
    if not isinstance(value, str):
        return None
    candidate = value.strip().strip("'\"")
    if candidate.lower().startswith("0x"):
        candidate = f"#{candidate[2:]}"
    return candidate.lower() if COLOR_PATTERN.match(candidate) else None


def _collect(colors: dict[str, str], table: Mapping[str, Any]) -> None:
    for key, value in table.items():
        if key not in _SLOTS:
            continue
        color = _normalize_color(value)
        if color is not None:
            colors[key] = color


def parse_palette(data: Mapping[str, Any]) -> Palette:
    """Build a :class:`Palette` from a parsed Alacritty config.

    Colors are read from the ``colors`` table and its ``primary``, ``normal``
    and ``cursor`` subtables, in document order. Missing or malformed slots
    keep their default value.
    """

    colors: dict[str, str] = {}
    _collect(colors, data)
    section = data.get("colors")
    if isinstance(section, Mapping):
        for key, value in section.items():
            if key in COLOR_SECTIONS and isinstance(value, Mapping):
                _collect(colors, value)
            elif key in _SLOTS:
                _collect(colors, {key: value})
    return replace(DEFAULT_PALETTE, **colors)


def _read_theme(path: Path) -> Mapping[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yml", ".yaml"}:
        loaded = yaml.safe_load(text)
    else:
        loaded = toml.loads(text)
    return loaded if isinstance(loaded, Mapping) else {}


def load_palette(path: Path) -> Palette:
    """Load the palette at *path*, falling back to :data:`DEFAULT_PALETTE`."""

    try:
        data = _read_theme(path)
    except FileNotFoundError:
        logger.info("Theme file not found at %s, using default palette", path)
        return DEFAULT_PALETTE
    except Exception as exc:
        logger.warning("Failed to load theme %s: %s", path, exc)
        return DEFAULT_PALETTE
    return parse_palette(data)


class ThemeWatcher:
    """Hold the current palette and publish a "palette changed" event.

    Subscribers receive the new palette. Callers read :attr:`palette` before
    rendering, so a missed event only delays a color change.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._listeners: list[PaletteListener] = []
        self._stamp = self._file_stamp()
        self.palette = load_palette(path)

    def _file_stamp(self) -> tuple[int, int] | None:
        try:
            stat = self.path.stat()
        except OSError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def subscribe(self, listener: PaletteListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reload(self) -> bool:
        """Re-read the theme file; return whether the palette changed."""

        self._stamp = self._file_stamp()
        palette = load_palette(self.path)
        if palette == self.palette:
            return False
        self.palette = palette
        for listener in list(self._listeners):
            try:
                listener(palette)
            except Exception:
                logger.exception("Palette listener %r failed", listener)
        return True

    def poll(self) -> bool:
        """Reload when the theme file was modified, created or deleted."""

        if self._file_stamp() == self._stamp:
            return False
        return self.reload()
