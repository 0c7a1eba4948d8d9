"""Network fetch helpers for the Balatro mod wiki."""
from typing import Dict, Optional
from urllib.parse import quote

import requests

from utils.constants import CATEGORY_PAGE_LIMIT, REQUEST_TIMEOUT, USER_AGENT
from .errors import FetchError

HTML_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
JSON_ACCEPT = 'application/json'


def build_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Create a session carrying the fixed request identity."""
    session = requests.Session()
    session.headers['User-Agent'] = user_agent
    return session


def fetch_page(session: requests.Session, url: str, params: Optional[Dict[str, str]] = None,
               accept: str = HTML_ACCEPT, timeout: float = REQUEST_TIMEOUT) -> str:
    """GET `url` and return the body text. Any failure is raised as FetchError."""
    headers = {'Accept': accept}
    try:
        response = session.get(url, params=params, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response.text
    except requests.exceptions.RequestException as e:
        raise FetchError(url, e) from e


def category_api_url(base_url: str) -> str:
    return f"{base_url}/w/api.php"


def category_query(category_key: str, cont: Optional[str] = None, limit: int = CATEGORY_PAGE_LIMIT) -> Dict[str, str]:
    """Query parameters for one page of a MediaWiki categorymembers listing."""
    params = {
        'action': 'query',
        'list': 'categorymembers',
        'cmtitle': f"Category:{category_key}",
        'format': 'json',
        'cmlimit': str(limit),
    }
    if cont:
        params['cmcontinue'] = cont
    return params


def fetch_category_page(session: requests.Session, base_url: str, category_key: str,
                        cont: Optional[str] = None, limit: int = CATEGORY_PAGE_LIMIT,
                        timeout: float = REQUEST_TIMEOUT) -> str:
    """Fetch one page of category members from the wiki API as raw JSON text."""
    return fetch_page(session, category_api_url(base_url), params=category_query(category_key, cont, limit),
                      accept=JSON_ACCEPT, timeout=timeout)


def mod_page_url(base_url: str, mod_name: str) -> str:
    """Canonical wiki address for a mod page (spaces become underscores)."""
    return f"{base_url}/wiki/{quote(mod_name.replace(' ', '_'))}"


def fetch_mod_page(session: requests.Session, base_url: str, mod_name: str,
                   timeout: float = REQUEST_TIMEOUT) -> str:
    """Fetch the rendered detail page for a single mod."""
    return fetch_page(session, mod_page_url(base_url, mod_name), timeout=timeout)
