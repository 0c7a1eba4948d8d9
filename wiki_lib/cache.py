"""Local JSON cache for the mod database."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from utils.constants import CACHE_FILE
from .errors import CacheCorruptError
from .models import ModDatabase

logger = logging.getLogger(__name__)


class CacheStore:
    """Load and persist the mod database at a fixed path (default ~/.cache/balatro-wiki/mods.json)."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or CACHE_FILE).expanduser()

    def load_or_create(self) -> ModDatabase:
        """Return the cached database, or a fresh empty one when no cache exists.

        A cache file that exists but cannot be opened or read back as a database
        raises CacheCorruptError instead of being replaced.
        """
        if not self.path.exists():
            logger.info(f"load_or_create: no cache at {self.path}, starting empty")
            return ModDatabase()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            db = ModDatabase.from_dict(data)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"load_or_create: cache {self.path} is corrupt: {e}")
            raise CacheCorruptError(self.path, e) from e

        logger.info(f"load_or_create: loaded {len(db.mods)} mods from {self.path}")
        return db

    def save(self, db: ModDatabase):
        """Write the database as pretty-printed JSON, replacing the previous file in one step."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix='.tmp', dir=str(self.path.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(db.to_dict(), f, indent=2, ensure_ascii=False)
            Path(tmp_name).replace(self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info(f"save: wrote {len(db.mods)} mods to {self.path}")
