"""WebFetch tool for autocli."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from autocli.utils.truncate import truncate

from .base import BaseTool, ToolContext, ToolResult

logger = logging.getLogger(__name__)

# Substrings of a Content-Type header that mark a text-like body
TEXT_CONTENT_MARKERS: Tuple[str, ...] = ("text", "json", "xml", "javascript", "css")

USER_AGENT = "autocli/1.0"


def is_text_content(content_type: str) -> bool:
    """A missing Content-Type is treated as text."""
    if not content_type:
        return True
    lowered = content_type.lower()
    return any(marker in lowered for marker in TEXT_CONTENT_MARKERS)


class WebFetchTool(BaseTool):
    """Tool to fetch the text of a public URL.

    Args:
        transport: Optional httpx transport, used in tests to stub the network.
    """

    name = "WebFetch"
    description = "Fetch a URL and return its text content"

    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self._transport = transport

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        url = parameters.get("url")
        if not isinstance(url, str) or not url:
            return self.error('"url" parameter is required.')

        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            return self.error(f"Invalid URL {url!r}: {e}")
        if parsed.scheme not in ("http", "https") or not parsed.host:
            return self.error(f"Invalid URL {url!r}: only http and https URLs are supported.")

        timeout = context.config.fetch_timeout
        try:
            with httpx.Client(
                transport=self._transport,
                timeout=timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = client.get(url)
        except httpx.TimeoutException:
            return self.error(f"Request to {url} timed out after {timeout:g} seconds.")
        except httpx.InvalidURL as e:
            return self.error(f"Invalid URL {url!r}: {e}")
        except httpx.HTTPError as e:
            return self.error(f"Failed to fetch {url}: {e}")

        if not response.is_success:
            return self.error(
                f"Failed to fetch {url}. Status: {response.status_code} {response.reason_phrase}"
            )

        content_type = response.headers.get("content-type", "")
        if not is_text_content(content_type):
            return self.error(
                f"Unsupported content type '{content_type}'. Only text-based content can be fetched."
            )

        body = response.text
        if not body:
            return ToolResult.ok("(Empty response body)")

        logger.debug("Fetched %s (%d chars, %s)", url, len(body), content_type)
        return ToolResult.ok(truncate(body, context.config.fetch_max_chars))
