"""
m3uslim: reduce M3U playlists to the best entry per channel.

Deutsch:
    m3uslim: reduziert M3U-Listen auf den besten Eintrag pro Sender.
"""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
