"""Configuration loading for the Balatro mod wiki tool.

Defaults live in `utils.constants`. An optional JSON config file can override
them per section:

    {
      "wiki": {"base_url": "...", "categories": [["Joker Mods", "Joker Mods"]]},
      "network": {"user_agent": "...", "timeout": 30, "max_workers": 16},
      "cache": {"path": "~/.cache/balatro-wiki/mods.json", "max_age_hours": 24},
      "logging": {"file": "~/.cache/balatro-wiki/balatro_wiki.log", "level": "INFO"}
    }

The file path comes from `--config`, then the `BALATRO_WIKI_CONFIG` environment
variable, then `~/.config/balatro-wiki/config.json`.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import (
    CACHE_FILE,
    CATEGORIES,
    CONFIG_ENV_VAR,
    CONFIG_FILE,
    LOG_FILE,
    MAX_AGE_HOURS,
    MAX_WORKERS,
    REQUEST_TIMEOUT,
    USER_AGENT,
    WIKI_BASE_URL,
)

logger = logging.getLogger(__name__)


@dataclass
class WikiConfig:
    base_url: str = WIKI_BASE_URL
    categories: List[Tuple[str, str]] = field(default_factory=lambda: list(CATEGORIES))
    user_agent: str = USER_AGENT
    timeout: float = REQUEST_TIMEOUT
    max_workers: int = MAX_WORKERS
    cache_file: Path = field(default_factory=lambda: Path(CACHE_FILE).expanduser())
    max_age_hours: float = MAX_AGE_HOURS
    log_file: Path = field(default_factory=lambda: Path(LOG_FILE).expanduser())
    log_level: str = 'INFO'


def resolve_config_path(path: Optional[str] = None) -> Path:
    """Return the config file location, honouring the explicit path and env override."""
    raw = path or os.environ.get(CONFIG_ENV_VAR) or CONFIG_FILE
    return Path(raw).expanduser()


def _parse_categories(raw) -> List[Tuple[str, str]]:
    categories = []
    for entry in raw:
        # Accept ["Display", "Key"] pairs or a bare display name used as its own key
        if isinstance(entry, str):
            categories.append((entry, entry))
        else:
            display, key = entry
            categories.append((str(display), str(key)))
    return categories


def _section(cfg: dict, name: str) -> dict:
    value = cfg.get(name, {})
    if not isinstance(value, dict):
        raise TypeError(f"section '{name}' must be an object, not {type(value).__name__}")
    return value


def _apply(config: WikiConfig, cfg) -> WikiConfig:
    if not isinstance(cfg, dict):
        raise TypeError(f"top level must be an object, not {type(cfg).__name__}")

    wiki = _section(cfg, 'wiki')
    if wiki.get('base_url'):
        config.base_url = str(wiki['base_url']).rstrip('/')
    if wiki.get('categories'):
        config.categories = _parse_categories(wiki['categories'])

    net = _section(cfg, 'network')
    config.user_agent = str(net.get('user_agent', config.user_agent))
    config.timeout = float(net.get('timeout', config.timeout))
    config.max_workers = max(1, int(net.get('max_workers', config.max_workers)))

    cache = _section(cfg, 'cache')
    if cache.get('path'):
        config.cache_file = Path(cache['path']).expanduser()
    config.max_age_hours = float(cache.get('max_age_hours', config.max_age_hours))

    log_cfg = _section(cfg, 'logging')
    if log_cfg.get('file'):
        config.log_file = Path(log_cfg['file']).expanduser()
    config.log_level = str(log_cfg.get('level', config.log_level)).upper()
    return config


def load_config(path: Optional[str] = None) -> WikiConfig:
    """Load the optional config file on top of the built-in defaults.

    A file that cannot be read, is not JSON, or holds values of the wrong shape
    is ignored with a warning and the defaults are used.
    """
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        return WikiConfig()

    try:
        with open(cfg_path, 'r', encoding='utf-8') as f:
            cfg = json.load(f)
        config = _apply(WikiConfig(), cfg)
    except (OSError, json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"load_config: ignoring unreadable config {cfg_path}: {e}")
        return WikiConfig()

    logger.info(f"load_config: loaded {cfg_path}")
    return config
