"""
Human-readable duration and size summaries of a response.
"""

import json
from typing import Any

from ..config import SizeDisplay
from ..schemas.http import HttpResponse, HttpResponseTimingPhases


_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(num_bytes: int, display: SizeDisplay = "auto") -> str:
    """
    Format a byte count.

    Example:
        >>> format_size(1536)
        '1.5 KB'
        >>> format_size(1536, "bytes")
        '1536 B'
    """
    if display == "bytes" or num_bytes < 1024:
        return f"{num_bytes} B"

    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{size:.2f}".rstrip("0").rstrip(".") + f" {_SIZE_UNITS[unit]}"


def timing_breakdown(phases: HttpResponseTimingPhases) -> list[str]:
    return [
        f"Socket: {phases.wait:.1f}ms",
        f"DNS: {phases.dns:.1f}ms",
        f"TCP: {phases.tcp:.1f}ms",
        f"Request: {phases.request:.1f}ms",
        f"FirstByte: {phases.first_byte:.1f}ms",
        f"Download: {phases.download:.1f}ms",
    ]


def size_breakdown(response: HttpResponse, display: SizeDisplay = "auto") -> list[str]:
    return [
        f"Headers: {format_size(response.headers_size_in_bytes, display)}",
        f"Body: {format_size(response.body_size_in_bytes, display)}",
    ]


def summarize(response: HttpResponse, display: SizeDisplay = "auto") -> dict[str, object]:
    """Duration and size texts with their breakdowns."""
    total_size = response.headers_size_in_bytes + response.body_size_in_bytes
    return {
        "duration": f"{round(response.timing_phases.total)}ms",
        "duration_breakdown": timing_breakdown(response.timing_phases),
        "size": format_size(total_size, display),
        "size_breakdown": size_breakdown(response, display),
    }


def parse_json_body(body: str | None, content_type: str | None) -> Any | None:
    """
    Try to parse response body as JSON if content type indicates JSON.

    Args:
        body: Response body string
        content_type: Content-Type header value

    Returns:
        Parsed JSON object or None if not JSON or parsing fails
    """
    if not body or not content_type:
        return None

    if "json" in content_type.lower():
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            return None

    return None
