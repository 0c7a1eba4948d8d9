# Utilities package for balatro-wiki
from .text import clean_text, truncate
from .constants import CATEGORIES, USER_AGENT, WIKI_BASE_URL
from .config import WikiConfig, load_config

__all__ = ["clean_text", "truncate", "CATEGORIES", "USER_AGENT", "WIKI_BASE_URL", "WikiConfig", "load_config"]
