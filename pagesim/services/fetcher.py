"""HTTP retrieval of the pages to compare.

Only public http/https hosts may be fetched; every redirect hop is checked
again before it is followed.
"""

import ipaddress
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx

MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB
TIMEOUT = 10  # seconds
MAX_REDIRECTS = 10
ALLOWED_SCHEMES = {"http", "https"}

_HEADERS = {
    "User-Agent": "pagesim/1.0 (+structural page comparison)",
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
}


def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        # Strip IPv6 zone IDs (e.g. "fe80::1%eth0")
        raw_ip = info[4][0].split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


def validate_url(url: str) -> None:
    """Raise ValueError unless *url* is an http(s) URL on a public host."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")


async def _read_html(response: httpx.Response) -> str:
    """Read the body of *response* within MAX_CONTENT_SIZE and decode it."""
    declared = response.headers.get("content-length")
    if declared and int(declared) > MAX_CONTENT_SIZE:
        raise RuntimeError("Response body exceeds the maximum allowed size.")

    body = bytearray()
    async for chunk in response.aiter_bytes():
        body.extend(chunk)
        if len(body) > MAX_CONTENT_SIZE:
            raise RuntimeError("Response body exceeds the maximum allowed size.")

    try:
        return bytes(body).decode(response.encoding or "utf-8", errors="replace")
    except LookupError:
        # Unknown charset label in Content-Type
        return bytes(body).decode("utf-8", errors="replace")


async def fetch_url(
    url: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Fetch *url* and return the decoded HTML.

    Redirects are followed by hand, at most MAX_REDIRECTS of them, and each
    target is validated before it is requested.  The body is decoded with the
    charset httpx derives from the response, replacing undecodable bytes.
    *transport* replaces the network layer (tests, proxies).

    Raises:
        ValueError: if the URL or a redirect target fails validation.
        httpx.HTTPError: on network or HTTP errors.
        RuntimeError: if the body exceeds MAX_CONTENT_SIZE or there are too
            many redirects.
    """
    validate_url(url)

    hops = [url]
    async with httpx.AsyncClient(
        follow_redirects=False, timeout=TIMEOUT, headers=_HEADERS, transport=transport
    ) as client:
        while len(hops) <= MAX_REDIRECTS + 1:
            async with client.stream("GET", hops[-1]) as response:
                if not response.is_redirect:
                    response.raise_for_status()
                    return await _read_html(response)
                target = urljoin(hops[-1], response.headers.get("location", ""))
            validate_url(target)
            hops.append(target)

    raise RuntimeError(f"Too many redirects (more than {MAX_REDIRECTS}).")
