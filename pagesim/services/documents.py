"""Turning request documents into path sets.

Fetch failures are reported as :class:`DocumentLoadError`, which carries the
HTTP status the API answers with and the label of the offending document.
"""

import asyncio
import logging
from typing import List, Sequence

import httpx
from playwright.async_api import Error as PlaywrightError

from pagesim.models.document import DocumentSource
from pagesim.models.path import PathSet
from pagesim.services.browser_fetcher import fetch_url_with_browser
from pagesim.services.extractor import extract_html
from pagesim.services.fetcher import fetch_url

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """A document could not be obtained."""

    def __init__(self, status_code: int, detail: str, label: str = "") -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.label = label


def source_label(source: DocumentSource, default: str) -> str:
    if source.label:
        return source.label
    if source.url is not None:
        return str(source.url)
    return default


async def load_html(source: DocumentSource, label: str = "") -> str:
    """Return the raw HTML of *source*, fetching it when given by URL.

    Raises:
        DocumentLoadError: if the URL is rejected or cannot be fetched.
    """
    if source.html is not None:
        return source.html

    url = str(source.url)
    try:
        if source.render_mode == "browser":
            return await fetch_url_with_browser(url, wait_ms=source.wait_ms)
        return await fetch_url(url)
    except ValueError as exc:
        logger.warning("Invalid or blocked URL: %s – %s", url, exc)
        raise DocumentLoadError(400, str(exc), label) from exc
    except httpx.TimeoutException as exc:
        logger.error("Timeout fetching URL: %s", url)
        raise DocumentLoadError(504, f"Timed out fetching {url}.", label) from exc
    except httpx.HTTPStatusError as exc:
        logger.error("HTTP error fetching URL %s: %s", url, exc)
        raise DocumentLoadError(
            502, f"{url} returned HTTP {exc.response.status_code}.", label
        ) from exc
    except (httpx.RequestError, RuntimeError) as exc:
        logger.error("Error fetching URL %s: %s", url, exc)
        raise DocumentLoadError(502, str(exc), label) from exc
    except PlaywrightError as exc:
        logger.error("Browser error for URL %s: %s", url, exc)
        raise DocumentLoadError(502, f"Browser error: {exc}", label) from exc


async def load_path_set(source: DocumentSource, default_label: str) -> PathSet:
    """Load *source* and extract its :class:`PathSet`.

    Parsing and extraction run in a worker thread so large documents do not
    hold up the event loop.
    """
    label = source_label(source, default_label)
    html = await load_html(source, label)
    return await asyncio.to_thread(extract_html, html, label)


async def load_path_sets(sources: Sequence[DocumentSource]) -> List[PathSet]:
    """Load several documents concurrently, preserving their order.

    Inline documents without a label are named ``document-<n>`` (1-based).
    When one document fails, the loads still in flight are cancelled and
    awaited before its error is raised.
    """
    tasks = [
        asyncio.ensure_future(load_path_set(source, f"document-{index}"))
        for index, source in enumerate(sources, start=1)
    ]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
