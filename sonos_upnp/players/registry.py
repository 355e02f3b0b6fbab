# sonos-upnp
# SPDX-License-Identifier: GPL-3.0-or-later

"""
PlayerRegistry — the set of players currently alive on the network.

Feed it discovery sightings (ssdp:alive / search responses):

    registry = PlayerRegistry()
    registry.on("added", lambda player: ...)
    registry.on("removed", lambda player: ...)
    registry.discovered({"address": "10.0.0.5", "location": "http://..."})

First sighting of an address creates a Player and initializes it; the player
only becomes visible once it emits ``ready``.  Later sightings refresh the
player's expiration.  Players that fail to initialize are dropped, players
that expire are removed.
"""

import logging
from collections.abc import Mapping

import pyee

from ..lib.upnp import UpnpClient
from .player import Player

log = logging.getLogger(__name__)


class PlayerRegistry(pyee.EventEmitter):

    def __init__(self, upnp: UpnpClient | None = None):
        super().__init__()
        self._upnp = upnp if upnp is not None else UpnpClient()
        self._players: dict[str, Player] = {}
        self._pending: dict[str, Player] = {}

    def __contains__(self, address: str):
        return address in self._players

    def __len__(self):
        return len(self._players)

    def get(self, address: str) -> Player | None:
        return self._players.get(address)

    def all(self) -> list[Player]:
        return list(self._players.values())

    def discovered(self, info: Mapping) -> Player:
        """Handle a presence signal for ``info["address"]``."""
        address = info["address"]

        player = self._players.get(address)
        if player is not None:
            player.refresh()
            return player

        player = self._pending.get(address)
        if player is not None:
            log.debug("Player %s still initializing, ignoring sighting", address)
            return player

        player = Player(info, upnp=self._upnp)
        player.on("ready", lambda: self._on_ready(player))
        player.on("error", lambda error: self._on_error(player, error))
        player.on("expired", lambda: self._on_expired(player))
        self._pending[address] = player
        log.info("Discovered player %s", address)
        player.init()
        return player

    def remove(self, address: str) -> Player | None:
        """Forget a player and cancel its timer."""
        self._pending.pop(address, None)
        player = self._players.pop(address, None)
        if player is None:
            return None
        player.cancel_expire()
        player.remove_all_listeners()
        log.info("Removed player %s", address)
        self.emit("removed", player)
        return player

    async def close(self):
        for address in list(self._players):
            self.remove(address)
        self._pending.clear()
        await self._upnp.close()

    # ── Player event handlers ──

    def _on_ready(self, player: Player):
        if self._pending.get(player.address) is not player:
            # removed while initializing; a newer player may own the slot now
            player.cancel_expire()
            player.remove_all_listeners()
            return
        del self._pending[player.address]
        self._players[player.address] = player
        log.info("Player %s added (%d alive)", player.address, len(self._players))
        self.emit("added", player)

    def _on_error(self, player: Player, error: Exception):
        if self._pending.get(player.address) is player:
            del self._pending[player.address]
        player.remove_all_listeners()
        log.warning("Dropping player %s: %s", player.address, error)

    def _on_expired(self, player: Player):
        if self._players.get(player.address) is player:
            log.info("Player %s expired", player.address)
            self.remove(player.address)
