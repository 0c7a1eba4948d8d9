"""Catalog refresh: staleness gate plus concurrent fetch-and-parse of every listed mod.

A refresh walks these states:

    IDLE -> COLLECTING_CATEGORIES -> FETCHING_ITEMS -> MERGING -> DONE | FAILED

Category and mod failures are isolated: they are logged, reported on the
result and simply leave their entries out of the new database. FAILED is only
entered on an unexpected orchestration error, which is re-raised.
"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import requests

from utils.config import WikiConfig
from utils.constants import MAX_AGE_HOURS, MAX_CATEGORY_PAGES
from .cache import CacheStore
from .errors import WikiError
from .fetch import fetch_category_page, fetch_mod_page
from .merge import merge_catalog
from .models import ItemOutcome, ModDatabase
from .parse import parse_category_continue, parse_category_members, parse_mod_page

logger = logging.getLogger(__name__)

# datetime keeps microseconds; longer fractions are cut to six digits
_FRACTION = re.compile(r'(\.\d{6})\d+')


class RefreshState(Enum):
    IDLE = 'idle'
    COLLECTING_CATEGORIES = 'collecting_categories'
    FETCHING_ITEMS = 'fetching_items'
    MERGING = 'merging'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class RefreshResult:
    database: ModDatabase
    failures: List[Tuple[str, BaseException]] = field(default_factory=list)
    category_failures: List[Tuple[str, BaseException]] = field(default_factory=list)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; None when it cannot be read."""
    try:
        text = _FRACTION.sub(r'\1', value.strip().replace('Z', '+00:00'))
        parsed = datetime.fromisoformat(text)
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def needs_refresh(db: ModDatabase, now: Optional[datetime] = None,
                  max_age_hours: float = MAX_AGE_HOURS) -> bool:
    """True when the database is empty, undated, or at least `max_age_hours` old."""
    if not db.mods:
        return True
    last_updated = parse_timestamp(db.last_updated)
    if last_updated is None:
        return True
    now = now or datetime.now(timezone.utc)
    return now - last_updated >= timedelta(hours=max_age_hours)


class CatalogRefresher:
    """Fetch every configured category and its mods, and merge them into a new database."""

    def __init__(self, session: requests.Session, config: Optional[WikiConfig] = None, verbose: bool = False):
        self.session = session
        self.config = config or WikiConfig()
        self.verbose = verbose
        self.state = RefreshState.IDLE

    def _echo(self, message: str):
        if self.verbose:
            print(message)

    def _enter(self, state: RefreshState):
        logger.info(f"refresh: {self.state.value} -> {state.value}")
        self.state = state

    def collect_category(self, category_key: str) -> List[str]:
        """List one category's mod names, following API continuation pages."""
        names: List[str] = []
        cont = None
        for _ in range(MAX_CATEGORY_PAGES):
            text = fetch_category_page(self.session, self.config.base_url, category_key,
                                       cont=cont, timeout=self.config.timeout)
            names.extend(parse_category_members(text))
            cont = parse_category_continue(text)
            if not cont:
                break
        else:
            logger.warning(f"collect_category: stopped '{category_key}' after {MAX_CATEGORY_PAGES} pages")
        return names

    def collect_categories(self) -> Tuple[Dict[str, List[str]], List[Tuple[str, BaseException]]]:
        category_members: Dict[str, List[str]] = {}
        failures: List[Tuple[str, BaseException]] = []
        for display_name, category_key in self.config.categories:
            self._echo(f"Collecting mods from category: {display_name}")
            try:
                names = self.collect_category(category_key)
            except WikiError as e:
                logger.error(f"collect_categories: failed to list '{display_name}': {e}")
                self._echo(f"  ✗ Failed to scrape category {display_name}: {e}")
                failures.append((display_name, e))
                names = []
            else:
                logger.info(f"collect_categories: '{display_name}' lists {len(names)} mods")
                self._echo(f"  ✓ Found {len(names)} mods")
            category_members[display_name] = names
        return category_members, failures

    def fetch_item(self, name: str) -> ItemOutcome:
        """Fetch and parse one mod page. Errors are returned, never raised."""
        try:
            html = fetch_mod_page(self.session, self.config.base_url, name, timeout=self.config.timeout)
            return ItemOutcome(name=name, fields=parse_mod_page(html, name))
        except WikiError as e:
            return ItemOutcome(name=name, error=e)

    def fetch_items(self, names: List[str]) -> Dict[str, ItemOutcome]:
        """Run one task per name on a bounded thread pool and key the outcomes by name."""
        outcomes: Dict[str, ItemOutcome] = {}
        if not names:
            return outcomes

        workers = max(1, min(self.config.max_workers, len(names)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self.fetch_item, name): name for name in names}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    outcome = future.result()
                except Exception as e:
                    logger.exception(f"fetch_items: task for '{name}' crashed")
                    outcome = ItemOutcome(name=name, error=e)

                if outcome.ok:
                    self._echo(f"  ✓ {name}")
                else:
                    logger.warning(f"fetch_items: failed to scrape '{name}': {outcome.error}")
                    self._echo(f"  ✗ Failed to scrape {name}: {outcome.error}")
                outcomes[name] = outcome
        return outcomes

    def run(self) -> RefreshResult:
        """Perform a full refresh and return the new database with any failures."""
        try:
            self._enter(RefreshState.COLLECTING_CATEGORIES)
            category_members, category_failures = self.collect_categories()

            # One fetch per mod even when several categories list it
            unique_names = list(dict.fromkeys(
                name for names in category_members.values() for name in names))
            self._echo(f"Processing {len(unique_names)} unique mods concurrently...")

            self._enter(RefreshState.FETCHING_ITEMS)
            outcomes = self.fetch_items(unique_names)

            self._enter(RefreshState.MERGING)
            merged = merge_catalog(category_members, outcomes, self.config.base_url)
        except Exception:
            self._enter(RefreshState.FAILED)
            logger.exception('refresh: aborted')
            raise

        self._enter(RefreshState.DONE)
        return RefreshResult(database=merged.database, failures=merged.failures,
                             category_failures=category_failures)


def ensure_fresh(store: CacheStore, refresher_factory: Callable[[], CatalogRefresher],
                 max_age_hours: float = MAX_AGE_HOURS, verbose: bool = False) -> ModDatabase:
    """Load the cached database, refreshing and saving it first when it is stale."""
    db = store.load_or_create()
    if not needs_refresh(db, max_age_hours=max_age_hours):
        logger.info(f"ensure_fresh: cache is current ({len(db.mods)} mods, updated {db.last_updated})")
        return db

    if verbose:
        print('🔄 Updating mod database...')
    result = refresher_factory().run()
    store.save(result.database)
    if verbose:
        print(f"✅ Database updated with {len(result.database.mods)} mods")
    return result.database
