"""
Response export service.

Renders a response as raw HTTP/1.x text and saves it to the responses folder.
"""

import logging
import os
import time
from pathlib import Path

from ..config import EXTENSION_FOLDER
from ..schemas.http import HttpResponse


logger = logging.getLogger(__name__)

RESPONSE_SAVE_FOLDER = EXTENSION_FOLDER / "responses"


def get_full_response_string(response: HttpResponse, eol: str = os.linesep) -> str:
    """
    Render a response as ``STATUS-LINE EOL HEADERS EOL BODY``.

    Headers are written one per line as received, so a repeated header such
    as Set-Cookie keeps its separate lines. The blank line and body are only
    emitted when the body is not empty.

    Example:
        HTTP/1.1 200 OK
        content-type: text/plain

        hi
    """
    status_line = f"HTTP/{response.http_version} {response.status_code} {response.status_message}{eol}"
    headers = response.raw_headers or list(response.headers.items())
    header_lines = "".join(f"{name}: {value}{eol}" for name, value in headers)
    body = f"{eol}{response.body}" if response.body else ""
    return f"{status_line}{header_lines}{body}"


def save_response(
    response: HttpResponse,
    folder: Path = RESPONSE_SAVE_FOLDER,
    eol: str = os.linesep
) -> Path:
    """
    Save the rendered response to ``Response-<epoch ms>.http`` in ``folder``.

    Returns:
        Path of the written file
    """
    folder.mkdir(parents=True, exist_ok=True)
    file_path = folder / f"Response-{int(time.time() * 1000)}.http"
    # newline="" keeps the rendered EOLs byte-for-byte
    with open(file_path, "w", encoding="utf-8", newline="") as f:
        f.write(get_full_response_string(response, eol))
    logger.info("Saved response to %s", file_path)
    return file_path
