"""
Players — Sonos speakers and the registry that tracks them.

  player.py    — Player: description fetch, expiration timer, commands, events
  registry.py  — PlayerRegistry: keeps alive players, drops expired ones
  sonos.py     — PlayerService: HTTP command endpoints for the configured player
"""

from .player import EXPIRE_SECONDS, Player
from .registry import PlayerRegistry

__all__ = ["EXPIRE_SECONDS", "Player", "PlayerRegistry"]
