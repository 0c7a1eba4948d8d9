"""Parsing helpers for Balatro mod wiki responses.

Category listings come from the MediaWiki API as JSON; mod pages are rendered
HTML. Description extraction is a declarative policy: an ordered list of
strategies, each pairing a candidate source with a qualification predicate and
a cap on how many candidates it may contribute.
"""
import json
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from bs4 import BeautifulSoup

from utils.constants import (
    DESCRIPTION_MAX_LEN,
    LINK_HOSTS,
    NO_DESCRIPTION,
    NON_CONTENT_PREFIXES,
)
from utils.text import clean_text, truncate
from .errors import ParseError
from .models import ModFields

# Phrases that mark wiki boilerplate rather than a mod description
BOILERPLATE_PHRASES = [
    'disambiguation',
    'redirect',
    'this article is a stub',
    'bibliography',
    'references',
    'external links',
    'see also',
    'categories',
    'navigation',
]
# Table-of-contents numbering leaking into paragraph text
TOC_MARKERS = ['2.1', '2.2', '2.3']
FEATURE_KEYWORDS = ['adds', 'features', 'includes', 'joker']


def is_content_title(title: str) -> bool:
    """True when `title` is an article rather than a meta/category/file/template page."""
    if title.startswith(NON_CONTENT_PREFIXES):
        return False
    namespace, sep, _ = title.partition(':')
    return not (sep and namespace.endswith(' talk'))


def _load_listing(text: str) -> dict:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"category listing is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"category listing has unexpected type {type(data).__name__}")
    if 'error' in data:
        raise ParseError(f"wiki API returned an error: {data['error']}")
    return data


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"category listing '{key}' has unexpected type {type(value).__name__}")
    return value


def parse_category_members(text: str) -> List[str]:
    """Return the content page titles listed in a categorymembers API response."""
    data = _load_listing(text)
    members = _section(data, 'query').get('categorymembers')
    if members is None:
        return []
    if not isinstance(members, list):
        raise ParseError(f"categorymembers has unexpected type {type(members).__name__}")

    names = []
    for member in members:
        title = member.get('title') if isinstance(member, dict) else None
        if isinstance(title, str) and title and is_content_title(title):
            names.append(title)
    return names


def parse_category_continue(text: str) -> Optional[str]:
    """Return the continuation token when the listing has more pages, else None."""
    data = _load_listing(text)
    token = _section(data, 'continue').get('cmcontinue')
    return str(token) if token else None


# --- Description policy ---

def _is_link(text: str) -> bool:
    return text.startswith('http')


def _mentions_link_host(text: str) -> bool:
    return any(host in text for host in LINK_HOSTS)


def _is_boilerplate(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in BOILERPLATE_PHRASES)


def _infobox_description_ok(text: str) -> bool:
    return len(text) > 10 and not _is_link(text) and 'github.com' not in text


def _paragraph_ok(text: str) -> bool:
    return (len(text) > 20
            and not _is_link(text)
            and not _mentions_link_host(text)
            and not _is_boilerplate(text)
            and not any(marker in text for marker in TOC_MARKERS))


def _feature_ok(text: str) -> bool:
    lowered = text.lower()
    return (len(text) > 15
            and not _is_link(text)
            and 'github.com' not in text
            and any(keyword in lowered for keyword in FEATURE_KEYWORDS))


def _content_block_ok(text: str) -> bool:
    lowered = text.lower()
    return (len(text) > 30
            and not _is_link(text)
            and not _mentions_link_host(text)
            and 'navigation' not in lowered
            and 'categories' not in lowered
            and 'this article is a stub' not in lowered)


def _infobox_cells(soup: BeautifulSoup, header_keywords: Iterable[str]):
    """Yield the value cell of every infobox row whose header mentions a keyword."""
    keywords = list(header_keywords)
    for row in soup.select('.infobox tr'):
        cells = row.find_all(['th', 'td'])
        if len(cells) < 2:
            continue
        header = cells[0].get_text(' ').lower()
        if any(keyword in header for keyword in keywords):
            yield cells[1]


def _infobox_descriptions(soup: BeautifulSoup) -> Iterable[str]:
    for cell in _infobox_cells(soup, ['description']):
        yield clean_text(cell.get_text(' '))


def _selected_texts(selector: str) -> Callable[[BeautifulSoup], Iterable[str]]:
    def extract(soup: BeautifulSoup) -> Iterable[str]:
        for element in soup.select(selector):
            yield clean_text(element.get_text(' '))
    return extract


@dataclass(frozen=True)
class DescriptionStrategy:
    name: str
    candidates: Callable[[BeautifulSoup], Iterable[str]]
    qualifies: Callable[[str], bool]
    limit: int


# Contributions from these strategies are joined into one description
DESCRIPTION_POLICY = (
    DescriptionStrategy('infobox', _infobox_descriptions, _infobox_description_ok, limit=1),
    DescriptionStrategy('paragraphs', _selected_texts('div.mw-parser-output > p'), _paragraph_ok, limit=3),
    DescriptionStrategy('features', _selected_texts('div.mw-parser-output ul li'), _feature_ok, limit=2),
)

# Used only when the main policy yields nothing useful; first candidate wins
FALLBACK_POLICY = (
    DescriptionStrategy('content-block',
                        _selected_texts('div.mw-parser-output div, div.mw-parser-output li'),
                        _content_block_ok, limit=1),
)


def _collect(strategy: DescriptionStrategy, soup: BeautifulSoup) -> List[str]:
    found = []
    for text in strategy.candidates(soup):
        if strategy.qualifies(text):
            found.append(text)
            if len(found) >= strategy.limit:
                break
    return found


def extract_description(soup: BeautifulSoup, max_len: int = DESCRIPTION_MAX_LEN) -> str:
    """Apply the description policy to a parsed mod page."""
    parts = []
    for strategy in DESCRIPTION_POLICY:
        parts.extend(_collect(strategy, soup))

    combined = ' '.join(parts)
    if len(combined) > 10:
        return truncate(combined, max_len)

    for strategy in FALLBACK_POLICY:
        found = _collect(strategy, soup)
        if found:
            return truncate(found[0], max_len)

    return NO_DESCRIPTION


def _infobox_value(soup: BeautifulSoup, keywords: Iterable[str]) -> Optional[str]:
    for cell in _infobox_cells(soup, keywords):
        value = clean_text(cell.get_text(' '))
        if value:
            return truncate(value, DESCRIPTION_MAX_LEN)
    return None


def _infobox_list(soup: BeautifulSoup, keywords: Iterable[str]) -> List[str]:
    for cell in _infobox_cells(soup, keywords):
        values = [clean_text(part) for part in re.split(r'[,;\n]', cell.get_text('\n'))]
        values = [v for v in values if v and v.lower() not in ('none', 'n/a', '-')]
        if values:
            return values
    return []


def parse_mod_page(html: str, fallback_name: str) -> ModFields:
    """Extract the structured fields of a mod from its rendered wiki page."""
    soup = BeautifulSoup(html, 'html.parser')

    heading = soup.select_one('h1.firstHeading')
    name = heading.get_text().strip() if heading else ''
    if not name:
        name = fallback_name

    github_url = None
    link = soup.select_one("a[href*='github.com']")
    if link:
        href = link.get('href')
        if isinstance(href, (list, tuple)):
            href = href[0]
        github_url = str(href)

    return ModFields(
        name=name,
        description=extract_description(soup).strip(),
        author=_infobox_value(soup, ['author']),
        version=_infobox_value(soup, ['version']),
        github_url=github_url,
        dependencies=_infobox_list(soup, ['dependenc', 'requires']),
    )
