import re
import secrets
import string
from urllib.parse import urlparse

ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 6
CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")
MAX_URL_LENGTH = 2048
# Code-shaped paths already taken by routes
RESERVED_CODES = {"healthz"}


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def is_valid_code(code) -> bool:
    return isinstance(code, str) and CODE_PATTERN.fullmatch(code) is not None


def is_valid_url(url) -> bool:
    """Absolute http(s) URL with a host. The URL itself is never rewritten."""
    if not url or not isinstance(url, str) or len(url) > MAX_URL_LENGTH:
        return False
    try:
        parsed = urlparse(url)
        # .port raises on garbage like "http://host:notaport"
        parsed.port
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)
