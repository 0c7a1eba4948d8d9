"""Read-only queries over a loaded mod database."""
from typing import List, Optional, Tuple

from utils.constants import SEARCH_LIMIT
from .errors import NotFoundError
from .models import ModDatabase, ModInfo

# Search weights, highest first
EXACT_NAME_SCORE = 100
NAME_SCORE = 50
DESCRIPTION_SCORE = 25
AUTHOR_SCORE = 20
CATEGORY_SCORE = 15


def list_categories(db: ModDatabase) -> List[Tuple[str, int]]:
    """Category names with their mod counts, in index order."""
    return [(category, len(names)) for category, names in db.categories.items()]


def resolve_category(db: ModDatabase, category: str) -> str:
    """Match a user-supplied category against the index.

    Tries an exact match, then a case-insensitive one, then a unique
    case-insensitive prefix (so `joker` finds `Joker Mods`).
    """
    if category in db.categories:
        return category

    wanted = category.strip().lower()
    for name in db.categories:
        if name.lower() == wanted:
            return name

    prefixed = [name for name in db.categories if wanted and name.lower().startswith(wanted)]
    if len(prefixed) == 1:
        return prefixed[0]

    raise NotFoundError('category', category, available=list(db.categories))


def browse(db: ModDatabase, category: Optional[str] = None):
    """Mods indexed under `category`, or the category summary when no category is given.

    Returns a (category name, mods) pair for a category and the output of
    `list_categories` otherwise. Unknown categories raise NotFoundError listing
    the valid ones.
    """
    if category is None:
        return list_categories(db)

    name = resolve_category(db, category)
    return name, [db.mods[mod_name] for mod_name in db.categories[name] if mod_name in db.mods]


def search_score(mod: ModInfo, query: str) -> int:
    """Score a mod against an already lower-cased query."""
    score = 0
    name = mod.name.lower()
    if name == query:
        score += EXACT_NAME_SCORE
    elif query in name:
        score += NAME_SCORE

    if query in mod.description.lower():
        score += DESCRIPTION_SCORE
    if mod.author and query in mod.author.lower():
        score += AUTHOR_SCORE
    if query in mod.category.lower():
        score += CATEGORY_SCORE
    return score


def search(db: ModDatabase, query: str, limit: int = SEARCH_LIMIT) -> List[Tuple[ModInfo, int]]:
    """Rank mods by relevance to `query`; ties keep catalog order."""
    query_lower = query.strip().lower()
    if not query_lower:
        return []

    matches = []
    for mod in db.mods.values():
        score = search_score(mod, query_lower)
        if score > 0:
            matches.append((mod, score))

    matches.sort(key=lambda match: match[1], reverse=True)
    return matches[:limit]


def info(db: ModDatabase, name: str) -> ModInfo:
    """Find a mod by name, ignoring case."""
    wanted = name.strip().lower()
    for mod in db.mods.values():
        if mod.name.lower() == wanted:
            return mod

    suggestions = [mod.name for mod, _ in search(db, name, limit=5)]
    raise NotFoundError('mod', name, available=suggestions)
