"""
Cookie persistence between requests.

Cookies are kept in a Netscape/Mozilla format file so they survive restarts.
A fresh jar is loaded from the file for every request and written back once
the exchange completes.
"""

import logging
from http.cookiejar import LoadError, MozillaCookieJar
from pathlib import Path

from ..config import EXTENSION_FOLDER


logger = logging.getLogger(__name__)

COOKIE_FILE_PATH = EXTENSION_FOLDER / "cookie.txt"

# MozillaCookieJar refuses to load files without this header line
_COOKIE_FILE_HEADER = "# Netscape HTTP Cookie File\n"


def ensure_cookie_file(path: Path = COOKIE_FILE_PATH) -> Path:
    """Create the cookie file (and its folder) if it does not exist yet."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists() or path.stat().st_size == 0:
        path.write_text(_COOKIE_FILE_HEADER, encoding="utf-8")
    return path


def load_cookie_jar(path: Path = COOKIE_FILE_PATH) -> MozillaCookieJar:
    jar = MozillaCookieJar(str(path))
    try:
        jar.load(ignore_discard=True, ignore_expires=True)
    except FileNotFoundError:
        ensure_cookie_file(path)
    except LoadError as e:
        logger.warning("Ignoring unreadable cookie file %s: %s", path, e)
    return jar


def save_cookie_jar(jar: MozillaCookieJar) -> None:
    jar.save(ignore_discard=True, ignore_expires=True)
