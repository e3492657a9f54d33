"""
Serializer: render a ``PlaylistDocument`` back into playlist text.

Deutsch:
    Schreibt ein Dokument wieder als Playlist-Text.
"""

from __future__ import annotations

from .models import PlaylistDocument


def serialize_playlist(document: PlaylistDocument) -> str:
    parts = [f"{document.header}\n"]
    parts.extend(entry.serialized() for entry in document.entries)
    return "".join(parts)


def serialized_size(document: PlaylistDocument) -> int:
    return len(serialize_playlist(document).encode("utf-8"))
