"""Single-shot HTTP fetching of rendered pages from a running dev server."""

from urllib.parse import urlparse

import httpx

MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_REDIRECTS = 10
ALLOWED_SCHEMES = {"http", "https"}
USER_AGENT = "MDX-SEO-Validator/1.0"


def _validate_url(url: str) -> None:
    """Raise ValueError if *url* is not an absolute http(s) URL with a valid port.

    Private and loopback hosts are allowed: the usual target is a dev server
    on localhost.
    """
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    if not parsed.hostname:
        raise ValueError("URL must have a valid hostname.")

    # urlparse raises ValueError for a port outside 0-65535
    parsed.port


async def fetch_html(url: str, timeout: float) -> str:
    """Fetch *url* once and return the response body as a string.

    A fresh client is used for every call, so no connection is reused and
    nothing is retried.

    Raises:
        ValueError: if the URL is not an http(s) URL.
        httpx.HTTPStatusError: if the final response is not exactly 200.
        httpx.HTTPError: on network errors and timeouts.
        RuntimeError: if the response body exceeds MAX_CONTENT_SIZE.
    """
    _validate_url(url)

    async with httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    ) as client:
        async with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise httpx.HTTPStatusError(
                    f"Request failed with status code {response.status_code}",
                    request=response.request,
                    response=response,
                )

            content_length = response.headers.get("content-length")
            if content_length and int(content_length) > MAX_CONTENT_SIZE:
                raise RuntimeError("Response body exceeds the maximum allowed size.")

            chunks = []
            total = 0
            async for chunk in response.aiter_bytes():
                total += len(chunk)
                if total > MAX_CONTENT_SIZE:
                    raise RuntimeError("Response body exceeds the maximum allowed size.")
                chunks.append(chunk)

            return b"".join(chunks).decode(errors="replace")
