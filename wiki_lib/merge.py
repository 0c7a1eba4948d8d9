"""Assemble a mod database from category listings and per-mod scrape outcomes."""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .fetch import mod_page_url
from .models import ItemOutcome, ModDatabase, ModInfo, utc_timestamp

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    database: ModDatabase
    # (lookup name, error) for every mod left out of the database
    failures: List[Tuple[str, BaseException]] = field(default_factory=list)


class DuplicateModError(Exception):
    """Two different wiki pages resolved to the same mod name."""


def assign_categories(category_members: Mapping[str, Sequence[str]]) -> Dict[str, str]:
    """Map each lookup name to its owning category.

    Categories are walked in mapping order and a name listed under several of
    them ends up in the last one.
    """
    owners: Dict[str, str] = {}
    for category, names in category_members.items():
        for name in names:
            owners[name] = category
    return owners


def merge_catalog(category_members: Mapping[str, Sequence[str]],
                  outcomes: Mapping[str, ItemOutcome],
                  base_url: str,
                  fetched_at: Optional[str] = None) -> MergeResult:
    """Build a fresh database; failed or missing outcomes are reported, not stored.

    The index is rebuilt from scratch and lists every category in
    `category_members`, even those that contributed nothing.
    """
    owners = assign_categories(category_members)
    mods: Dict[str, ModInfo] = {}
    index: Dict[str, List[str]] = {category: [] for category in category_members}
    failures: List[Tuple[str, BaseException]] = []
    sources: Dict[str, str] = {}
    handled = set()

    for category, names in category_members.items():
        for lookup_name in names:
            if owners.get(lookup_name) != category or lookup_name in handled:
                # Claimed by a later category, or listed twice in this one
                continue
            handled.add(lookup_name)
            outcome = outcomes.get(lookup_name)
            if outcome is None:
                failures.append((lookup_name, LookupError(f"no result for '{lookup_name}'")))
                continue
            if not outcome.ok:
                failures.append((lookup_name, outcome.error))
                continue

            fields = outcome.fields
            name = fields.name or lookup_name
            if name in mods:
                failures.append((lookup_name, DuplicateModError(
                    f"'{lookup_name}' resolves to '{name}', already provided by '{sources[name]}'")))
                continue

            mods[name] = ModInfo(
                name=name,
                description=fields.description,
                author=fields.author,
                version=fields.version,
                github_url=fields.github_url,
                wiki_url=mod_page_url(base_url, lookup_name),
                category=category,
                dependencies=list(fields.dependencies),
            )
            sources[name] = lookup_name
            index[category].append(name)

    for lookup_name, error in failures:
        logger.info(f"merge_catalog: dropped '{lookup_name}': {error}")
    logger.info(f"merge_catalog: {len(mods)} mods across {len(index)} categories, {len(failures)} dropped")

    database = ModDatabase(mods=mods, categories=index, last_updated=fetched_at or utc_timestamp())
    return MergeResult(database=database, failures=failures)
