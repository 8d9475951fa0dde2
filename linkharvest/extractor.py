from typing import Callable, Optional

import requests
from loguru import logger

from .classifier import LinkClassifier, group
from .config import settings
from .errors import ApiError
from .fetching import fetch_text
from .models import ClassifiedLinks
from .rules import DomainRules
from .scraper import scrape
from .url_utils import InvalidURLError, hostname_of, matches_any, validate

PROFILE_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8"


def fetch_profile_html(url: str) -> str:
    return fetch_text(
        url,
        headers={"User-Agent": settings.user_agent, "Accept": PROFILE_ACCEPT},
        timeout=settings.profile_fetch_timeout,
    )


def check_profile_url(raw_url: str, rules: DomainRules) -> str:
    """Validate a profile URL and check its host is a supported builder. No network access."""
    profile_url = (raw_url or "").strip()
    if not profile_url:
        raise ApiError("profile_url_required")
    try:
        profile_url = validate(profile_url)
    except InvalidURLError as e:
        raise ApiError(e.code)

    if not matches_any(hostname_of(profile_url), rules.allowed_domains):
        raise ApiError(
            "domain_not_supported",
            message=f"Allowed domains: {', '.join(rules.allowed_domains)}",
        )
    return profile_url


def extract_links(
    raw_url: str,
    rules: DomainRules,
    fetch_html: Optional[Callable[[str], str]] = None,
) -> dict:
    """
    Fetch a link-in-bio page and return its classified outbound links:

        {"source": "linktr.ee", "links": ClassifiedLinks}
    """
    profile_url = check_profile_url(raw_url, rules)
    source = hostname_of(profile_url)
    fetch_html = fetch_html or fetch_profile_html

    try:
        html = fetch_html(profile_url)
    except requests.RequestException as e:
        logger.error(f"Profile fetch failed for {profile_url}: {e}")
        raise ApiError("extraction_failed", status_code=500, details=str(e))

    candidates = scrape(html)
    classified = LinkClassifier(rules).process(candidates, profile_url)
    links: ClassifiedLinks = group(classified)

    logger.info(
        f"Extracted {len(candidates)} candidates from {profile_url}: "
        f"{len(links.social)} social, {len(links.community)} community, "
        f"{len(links.affiliate_shop)} shop"
    )
    return {"source": source, "links": links}
