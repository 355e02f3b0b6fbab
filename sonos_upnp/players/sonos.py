# sonos-upnp
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Sonos player service (sonos-upnp)

Keeps a PlayerRegistry of Sonos speakers and exposes HTTP command endpoints
(port 8766 by default) so other processes can drive the configured speaker
without speaking UPnP themselves:

  GET  /player/status   — players alive + their description summary
  POST /player/play     — Play
  POST /player/pause    — Pause
  POST /player/stop     — Stop
  POST /player/next     — Next
  POST /player/prev     — Previous
  GET  /player/volume   — current volume
  POST /player/volume   — {"volume": 0-100}

Every endpoint accepts ``?address=`` to target a player other than the
configured one.
"""

import asyncio
import logging
import signal

from aiohttp import web

from ..lib.config import cfg
from ..lib.errors import UpnpError
from ..lib.upnp import DESCRIPTION_PATH, UpnpClient
from .player import Player
from .registry import PlayerRegistry

logger = logging.getLogger("sonos-upnp")

HTTP_PORT = cfg("http", "port", default=8766)


def seed_from_config() -> dict | None:
    """Seed record for the configured player, or None when no player.ip is set."""
    ip = cfg("player", "ip", default="")
    if not ip:
        return None
    port = cfg("upnp", "port", default=1400)
    location = cfg("player", "location", default=f"http://{ip}:{port}{DESCRIPTION_PATH}")
    return {"address": ip, "location": location}


class PlayerService:

    def __init__(self, registry: PlayerRegistry | None = None, port: int = HTTP_PORT):
        self.registry = registry if registry is not None else PlayerRegistry(UpnpClient())
        self.port = port
        self.default_address: str | None = None
        self._runner: web.AppRunner | None = None
        self.registry.on("added", self._on_added)
        self.registry.on("removed", self._on_removed)

    # ── Registry events ──

    def _on_added(self, player: Player):
        attrs = player.attributes or {}
        logger.info("Player online: %s (%s %s)", player.address,
                    attrs.get("roomName", "?"), attrs.get("modelName", ""))

    def _on_removed(self, player: Player):
        logger.info("Player gone: %s", player.address)

    # ── HTTP server ──

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/player/status", self._handle_status)
        app.router.add_post("/player/play", self._handle_play)
        app.router.add_post("/player/pause", self._handle_pause)
        app.router.add_post("/player/stop", self._handle_stop)
        app.router.add_post("/player/next", self._handle_next)
        app.router.add_post("/player/prev", self._handle_prev)
        app.router.add_get("/player/volume", self._handle_get_volume)
        app.router.add_post("/player/volume", self._handle_set_volume)
        return app

    async def start(self):
        """Seed the configured player and start listening."""
        seed = seed_from_config()
        if seed:
            self.default_address = seed["address"]
            self.registry.discovered(seed)
        else:
            logger.warning("No player.ip configured — waiting for ?address= requests")

        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, "0.0.0.0", self.port)
        await site.start()
        logger.info("Player service: HTTP on port %d", self.port)

    async def run(self):
        """Convenience entry-point: start + wait for signal + stop."""
        await self.start()
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)
        try:
            await stop_event.wait()
        finally:
            await self.shutdown()

    async def shutdown(self):
        await self.registry.close()
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    # ── HTTP route handlers ──

    def _cors_headers(self):
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        }

    def _target(self, request: web.Request) -> Player | None:
        address = request.query.get("address") or self.default_address
        return self.registry.get(address) if address else None

    async def _command(self, request: web.Request, name: str, *args) -> web.Response:
        player = self._target(request)
        if player is None:
            return web.json_response(
                {"status": "error", "error": "player not available"},
                status=503, headers=self._cors_headers())
        try:
            result = await getattr(player, name)(*args)
        except UpnpError as e:
            logger.error("%s on %s failed: %s", name, player.address, e)
            return web.json_response(
                {"status": "error", "error": str(e)},
                status=502, headers=self._cors_headers())
        return web.json_response(
            {"status": "ok", "result": result}, headers=self._cors_headers())

    async def _handle_play(self, request: web.Request) -> web.Response:
        return await self._command(request, "play")

    async def _handle_pause(self, request: web.Request) -> web.Response:
        return await self._command(request, "pause")

    async def _handle_stop(self, request: web.Request) -> web.Response:
        return await self._command(request, "stop")

    async def _handle_next(self, request: web.Request) -> web.Response:
        return await self._command(request, "next")

    async def _handle_prev(self, request: web.Request) -> web.Response:
        return await self._command(request, "previous")

    async def _handle_get_volume(self, request: web.Request) -> web.Response:
        return await self._command(request, "get_volume")

    async def _handle_set_volume(self, request: web.Request) -> web.Response:
        try:
            data = await request.json()
            volume = int(data["volume"])
        except (ValueError, KeyError, TypeError):
            return web.json_response(
                {"status": "error", "error": "expected {\"volume\": 0-100}"},
                status=400, headers=self._cors_headers())
        volume = max(0, min(100, volume))
        return await self._command(request, "set_volume", volume)

    async def _handle_status(self, request: web.Request) -> web.Response:
        players = []
        for player in self.registry.all():
            attrs = player.attributes or {}
            players.append({
                "address": player.address,
                "room_name": attrs.get("roomName"),
                "model_name": attrs.get("modelName"),
                "udn": attrs.get("UDN"),
                "expiring": player.expiring,
            })
        return web.json_response({
            "default_address": self.default_address,
            "players": players,
        }, headers=self._cors_headers())


async def main():
    """Main entry point."""
    service = PlayerService()
    await service.run()
