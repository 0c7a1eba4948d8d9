"""Data types for the mod catalog."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ModFields:
    """Fields scraped from a single mod page."""
    name: str
    description: str
    author: Optional[str] = None
    version: Optional[str] = None
    github_url: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ModInfo:
    name: str
    description: str
    author: Optional[str]
    version: Optional[str]
    github_url: Optional[str]
    wiki_url: str
    category: str
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'description': self.description,
            'author': self.author,
            'version': self.version,
            'github_url': self.github_url,
            'wiki_url': self.wiki_url,
            'category': self.category,
            'dependencies': list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ModInfo':
        """Build from a cache entry. Raises KeyError/TypeError/ValueError on bad shapes."""
        if not isinstance(data, dict):
            raise TypeError(f"mod entry must be an object, got {type(data).__name__}")
        name = data['name']
        if not isinstance(name, str) or not name:
            raise ValueError('mod name must be a non-empty string')
        dependencies = data.get('dependencies', [])
        if not isinstance(dependencies, list) or not all(isinstance(d, str) for d in dependencies):
            raise TypeError('dependencies must be a list of strings')
        for key in ('description', 'wiki_url', 'category'):
            if not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string")
        for key in ('author', 'version', 'github_url'):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string or null")
        return cls(
            name=name,
            description=data['description'],
            author=data.get('author'),
            version=data.get('version'),
            github_url=data.get('github_url'),
            wiki_url=data['wiki_url'],
            category=data['category'],
            dependencies=list(dependencies),
        )


@dataclass
class ItemOutcome:
    """Result of one detail-page task: parsed fields or the error that stopped it."""
    name: str
    fields: Optional[ModFields] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.fields is not None and self.error is None


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Return an RFC 3339 UTC timestamp."""
    return (now or datetime.now(timezone.utc)).astimezone(timezone.utc).isoformat()


@dataclass
class ModDatabase:
    """Catalog snapshot: mods keyed by name plus the per-category index."""
    mods: Dict[str, ModInfo] = field(default_factory=dict)
    categories: Dict[str, List[str]] = field(default_factory=dict)
    last_updated: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict:
        return {
            'mods': {name: mod.to_dict() for name, mod in self.mods.items()},
            'categories': {cat: list(names) for cat, names in self.categories.items()},
            'last_updated': self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ModDatabase':
        """Rebuild a database from its JSON form, checking index/item consistency."""
        if not isinstance(data, dict):
            raise TypeError(f"database must be an object, got {type(data).__name__}")
        raw_mods = data['mods']
        raw_categories = data['categories']
        last_updated = data['last_updated']
        if not isinstance(raw_mods, dict) or not isinstance(raw_categories, dict):
            raise TypeError("'mods' and 'categories' must be objects")
        if not isinstance(last_updated, str):
            raise TypeError("'last_updated' must be a string")

        mods = {key: ModInfo.from_dict(value) for key, value in raw_mods.items()}
        for key, mod in mods.items():
            if key != mod.name:
                raise ValueError(f"mod stored under '{key}' is named '{mod.name}'")
        categories: Dict[str, List[str]] = {}
        seen = set()
        for category, names in raw_categories.items():
            if not isinstance(names, list):
                raise TypeError(f"category '{category}' must list mod names")
            for name in names:
                if name not in mods:
                    raise ValueError(f"category '{category}' references unknown mod '{name}'")
                if mods[name].category != category:
                    raise ValueError(f"mod '{name}' is indexed under '{category}' but belongs to '{mods[name].category}'")
                if name in seen:
                    raise ValueError(f"mod '{name}' is indexed more than once")
                seen.add(name)
            categories[category] = list(names)
        return cls(mods=mods, categories=categories, last_updated=last_updated)
