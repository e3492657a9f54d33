"""
File adapter around the pure pipeline: reads input text, writes results.

Deutsch:
    Datei-Ein- und Ausgabe rund um die Pipeline.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import PlaylistInputError

log = logging.getLogger(__name__)

PLAYLIST_SUFFIXES = (".m3u", ".m3u8")


def read_playlist(path: Path) -> str:
    path = Path(path)
    if not path.exists():
        raise PlaylistInputError(f"playlist {path} not found")
    if not path.is_file():
        raise PlaylistInputError(f"playlist {path} is not a file")
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as fh:
            text = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise PlaylistInputError(f"failed to read playlist {path}: {exc}") from exc
    log.info("loaded playlist %s (%d bytes)", path, path.stat().st_size)
    return text


def write_playlist(path: Path, text: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)
    log.info("wrote playlist %s (%d bytes)", path, len(text.encode("utf-8")))
    return path


def write_report(path: Path, payload: Dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, sort_keys=True)
        fh.write("\n")
    return path


def default_output_path(input_path: Path, output_path: Optional[Path] = None) -> Path:
    """``<stem>_processed.m3u`` next to the input unless an output is given."""

    if output_path is not None:
        return Path(output_path)
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}_processed.m3u")


def list_playlists(directory: Path) -> List[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.iterdir() if path.suffix.lower() in PLAYLIST_SUFFIXES)
