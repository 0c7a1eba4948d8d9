import re
import unicodedata

_MARKUP_ARTIFACTS = ['[[', ']]', '{{', '}}', '()']
_NOISY_HOSTS = ('github.com', 'gamebanana.com')


def clean_text(text: str) -> str:
    """Clean scraped wiki text: collapse whitespace, drop bare links and markup leftovers.

    This is the canonical cleaning function used by the page parser.
    """
    words = []
    for word in text.split():
        # Remove URLs and link-host references, they carry no prose
        if word.startswith('http') or any(host in word for host in _NOISY_HOSTS):
            continue
        words.append(word)
    cleaned = ' '.join(words)

    for artifact in _MARKUP_ARTIFACTS:
        cleaned = cleaned.replace(artifact, '')

    return re.sub(r'\s{2,}', ' ', cleaned).strip()


def truncate(text: str, max_len: int) -> str:
    """Shorten `text` to at most `max_len` characters, ending in '...' when cut.

    Works on code points and backs off so a base character is never separated
    from the combining marks that follow it.
    """
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return '...'[:max(max_len, 0)]

    cut = max_len - 3
    while cut > 0 and unicodedata.combining(text[cut]):
        cut -= 1
    return text[:cut] + '...'
