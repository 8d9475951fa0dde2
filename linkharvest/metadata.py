from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from loguru import logger

from .config import settings
from .fetching import fetch_text
from .models import PageMeta

DEFAULT_CURRENCY = "USD"


def _meta_content(soup: BeautifulSoup, *keys: str) -> Optional[str]:
    """Content of the first <meta property=...> or <meta name=...> found for `keys`, in order."""
    for key in keys:
        tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if tag and tag.get("content"):
            content = tag["content"].strip()
            if content:
                return content
    return None


def format_price(amount: Optional[str], currency: Optional[str]) -> Optional[str]:
    if not amount:
        return None
    return f"{(currency or DEFAULT_CURRENCY).upper()} {amount}"


def parse_meta(html: str, url: str) -> PageMeta:
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, "og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    image = _meta_content(soup, "og:image", "twitter:image")
    if image:
        image = urljoin(url, image)

    price = format_price(
        _meta_content(soup, "product:price:amount", "og:price:amount"),
        _meta_content(soup, "product:price:currency", "og:price:currency"),
    )

    return PageMeta(
        url=url,
        title=title,
        description=_meta_content(soup, "og:description", "description"),
        image_url=image,
        price=price,
    )


def fetch_meta(url: str, timeout: Optional[float] = None) -> Optional[PageMeta]:
    """Best-effort Open Graph preview of `url`. Returns None if anything goes wrong."""
    try:
        html = fetch_text(
            url,
            headers={"User-Agent": settings.user_agent},
            timeout=timeout or settings.meta_fetch_timeout,
        )
        return parse_meta(html, url)
    except Exception as e:
        logger.warning(f"Metadata fetch failed for {url}: {e}")
        return None
