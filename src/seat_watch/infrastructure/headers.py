from __future__ import annotations

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


def make_headers(base_url: str, *, form: bool = False) -> dict[str, str]:
    """Return browser-like headers for the reservation site.

    Catalog lookups are form POSTs issued from the index page; schedule
    searches are GETs issued from the site root. The Referer mirrors that.
    """
    referer = f"{base_url}/index" if form else f"{base_url}/"
    headers = {
        "Accept": "application/xml, text/xml, */*" if form else "text/html,application/xhtml+xml,*/*",
        "Accept-Language": "ja,en-US;q=0.8,en;q=0.7",
        "Referer": referer,
        "User-Agent": USER_AGENT,
    }
    if form:
        headers["X-Requested-With"] = "XMLHttpRequest"
    return headers
