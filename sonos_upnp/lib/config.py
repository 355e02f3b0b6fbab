"""
Shared configuration loader for sonos-upnp.

Loads a single JSON config file.  Search order:
  1. $SONOS_UPNP_CONFIG             (explicit override)
  2. /etc/sonos-upnp/config.json    (system install)
  3. config.json                    (CWD — handy for local dev)

Usage:
    from sonos_upnp.lib.config import cfg

    player_ip   = cfg("player", "ip", default="")
    expire      = cfg("player", "expire_seconds", default=1800)
    upnp        = cfg("upnp")  # returns the whole dict
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

_config: dict | None = None


def _search_paths() -> list[str]:
    paths = ["/etc/sonos-upnp/config.json", "config.json"]
    override = os.environ.get("SONOS_UPNP_CONFIG")
    if override:
        paths.insert(0, override)
    return paths


def _section(config: dict, name: str, path: str) -> dict:
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logger.warning("Config %s: section '%s' must be an object, got %r — ignoring it",
                       path, name, section)
        return {}
    return section


def _validate(config: dict, path: str) -> None:
    """Warn about missing or suspicious config values."""
    player = _section(config, "player", path)
    if not player.get("ip"):
        logger.warning("Config %s: missing player.ip — no player will be seeded", path)
    expire = player.get("expire_seconds")
    if expire is not None and (not isinstance(expire, (int, float)) or expire <= 0):
        logger.warning("Config %s: player.expire_seconds must be a positive number, got %r",
                       path, expire)
    upnp = _section(config, "upnp", path)
    timeout = upnp.get("timeout")
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        logger.warning("Config %s: upnp.timeout must be a positive number, got %r", path, timeout)


def load_config() -> dict:
    """Load config from the first JSON file found. Cached after first call."""
    global _config
    if _config is not None:
        return _config

    for path in _search_paths():
        try:
            with open(path) as f:
                data = json.load(f)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            continue
        if not isinstance(data, dict):
            logger.error("Config %s: top level must be an object, got %s",
                         path, type(data).__name__)
            continue
        _config = data
        logger.info("Config loaded from %s", path)
        _validate(_config, path)
        return _config

    logger.debug("No config.json found — using empty config")
    _config = {}
    return _config


def cfg(section: str, key: str | None = None, *, default=None):
    """Read a config value.

    cfg("player")                        → config["player"]
    cfg("player", "ip")                  → config["player"]["ip"]
    cfg("upnp", "timeout", default=5)    → config["upnp"]["timeout"] or 5
    """
    config = load_config()
    val = config.get(section)
    if key is None:
        return val if val is not None else default
    if isinstance(val, dict):
        return val.get(key, default)
    return default


def reload_config():
    """Force re-read from disk (for testing or hot-reload)."""
    global _config
    _config = None
    return load_config()
