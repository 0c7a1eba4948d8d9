"""Pytest configuration for balatro-wiki tests."""
import json
import sys
from pathlib import Path
from urllib.parse import unquote

import pytest
import requests

# Add the repository root to the path so tests can import the CLI module and packages
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

FIXTURES = Path(__file__).parent / 'fixtures'


class FakeResponse:
    def __init__(self, text='', status_code=200, url=''):
        self.text = text
        self.status_code = status_code
        self.url = url

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


class FakeWiki:
    """Stands in for a requests.Session talking to the wiki.

    `categories` maps a category key to the member titles (or an exception to
    raise); `pages` maps a mod name to its HTML, a status code, or an exception.
    """

    def __init__(self, categories=None, pages=None):
        self.categories = categories or {}
        self.pages = pages or {}
        self.calls = []
        self.headers = {}

    def _respond(self, entry, url):
        if isinstance(entry, BaseException):
            raise entry
        if isinstance(entry, int):
            return FakeResponse('', status_code=entry, url=url)
        return FakeResponse(entry, url=url)

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, dict(params or {}), timeout))
        if params and params.get('list') == 'categorymembers':
            key = params['cmtitle'][len('Category:'):]
            entry = self.categories.get(key, [])
            if isinstance(entry, list):
                members = [{'ns': 0, 'title': title} for title in entry]
                entry = json.dumps({'batchcomplete': '', 'query': {'categorymembers': members}})
            return self._respond(entry, url)

        name = unquote(url.rsplit('/wiki/', 1)[1]).replace('_', ' ')
        return self._respond(self.pages.get(name, 404), url)

    def page_requests(self):
        return [url for url, params, _ in self.calls if '/wiki/' in url]


def mod_html(name, description, author=None, github=None):
    """Minimal rendered mod page."""
    rows = ''
    if author:
        rows += f'<tr><th>Author</th><td>{author}</td></tr>'
    link = f'<p><a href="{github}">Source code</a></p>' if github else ''
    return (f'<html><body><h1 class="firstHeading">{name}</h1>'
            f'<div class="mw-parser-output"><table class="infobox">{rows}</table>'
            f'<p>{description}</p>{link}</div></body></html>')


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def fake_wiki():
    return FakeWiki


@pytest.fixture
def make_mod_html():
    return mod_html
