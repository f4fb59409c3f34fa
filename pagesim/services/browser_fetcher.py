"""Playwright-based fetcher for pages whose structure is built by JavaScript.

The plain HTTP response of a single-page application is an almost empty
shell; comparing shells says nothing about the rendered templates.  This
fetcher returns the DOM after the page has settled instead.
"""

from playwright.async_api import async_playwright

from pagesim.services.fetcher import MAX_CONTENT_SIZE, validate_url

TIMEOUT_MS = 30_000  # 30 s in milliseconds


async def fetch_url_with_browser(url: str, *, wait_ms: int = 0) -> str:
    """Render *url* with a headless Chromium browser and return the serialised DOM.

    Args:
        url: The target URL (must be http/https and public).
        wait_ms: Extra milliseconds to wait after network idle (0 = none).

    Raises:
        ValueError: if the URL fails validation.
        RuntimeError: if the rendered HTML exceeds MAX_CONTENT_SIZE.
        playwright.async_api.Error: on browser/network errors.
    """
    validate_url(url)

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(
            headless=True,
            # --no-sandbox: Chromium's sandbox is unavailable when running as
            # root inside a container.
            args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
        )
        context = await browser.new_context()
        try:
            page = await context.new_page()
            await page.goto(url, wait_until="networkidle", timeout=TIMEOUT_MS)
            if wait_ms > 0:
                await page.wait_for_timeout(wait_ms)
            html = await page.content()
        finally:
            await context.close()
            await browser.close()

    if len(html.encode()) > MAX_CONTENT_SIZE:
        raise RuntimeError("Rendered HTML exceeds the maximum allowed size.")

    return html
