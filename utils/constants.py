"""Shared constants for the Balatro mod wiki tool."""

WIKI_BASE_URL = "https://balatromods.miraheze.org"

# Identity sent with every request; the wiki rejects obvious bot agents
USER_AGENT = 'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'

REQUEST_TIMEOUT = 30  # seconds
MAX_WORKERS = 16

# (display name, wiki category key)
CATEGORIES = [
    ('Content Mods', 'Content Mods'),
    ('Joker Mods', 'Joker Mods'),
    ('Quality of Life Mods', 'Quality of Life Mods'),
    ('Crossover Mods', 'Crossover Mods'),
    ('Technical Mods', 'Technical Mods'),
    ('API Mods', 'API Mods'),
]

CATEGORY_PAGE_LIMIT = 50
MAX_CATEGORY_PAGES = 20

CACHE_FILE = '~/.cache/balatro-wiki/mods.json'
LOG_FILE = '~/.cache/balatro-wiki/balatro_wiki.log'
CONFIG_FILE = '~/.config/balatro-wiki/config.json'
CONFIG_ENV_VAR = 'BALATRO_WIKI_CONFIG'
MAX_AGE_HOURS = 24

DESCRIPTION_MAX_LEN = 500
SUMMARY_MAX_LEN = 300
NO_DESCRIPTION = 'No description available'

SEARCH_LIMIT = 20

# Wiki namespaces that never hold mod pages
NON_CONTENT_PREFIXES = (
    'Category:', 'File:', 'Template:', 'Help:', 'User:', 'MediaWiki:',
    'Module:', 'Special:', 'Talk:',
)

# Link hosts whose URLs are noise inside prose
LINK_HOSTS = ['github.com', 'gamebanana.com', 'drive.google.com']
