from typing import Iterable, List, Optional, Tuple

from loguru import logger

from .models import (
    DEFAULT_SHOP_TITLE,
    ClassifiedLink,
    ClassifiedLinks,
    CommunityPreview,
    ShopPreview,
    SocialPreview,
)
from .rules import DomainRules
from .url_utils import (
    domain_matches,
    hostname_of,
    matches_any,
    origin_of,
    resolve_relative,
    title_from_path,
)


def match_platform(host: str, table: Iterable[Tuple[str, str]]) -> Optional[str]:
    """First platform in `table` whose domain matches `host`."""
    for domain, platform in table:
        if domain_matches(host, domain):
            return platform
    return None


class LinkClassifier:
    """
    Filters scraped candidates down to outbound links and sorts them into
    social, community and shop/website links using the given rule tables.
    """

    def __init__(self, rules: DomainRules):
        self.rules = rules

    def outbound_links(self, candidates: Iterable[str], profile_url: str) -> List[str]:
        profile_origin = origin_of(profile_url)
        profile_host = hostname_of(profile_url)

        outbound = {}
        for candidate in candidates:
            url = resolve_relative(candidate, profile_origin)
            if url is None:
                logger.debug(f"Dropping unresolvable candidate: {candidate!r}")
                continue

            host = hostname_of(url)
            if domain_matches(host, profile_host):
                continue
            if matches_any(host, self.rules.blocked_domains):
                logger.debug(f"Dropping blocked link: {url}")
                continue
            # Not implied by the host check: the profile URL may be typed
            # differently from how its links are rendered.
            if url.startswith(profile_url):
                continue

            outbound[url] = None

        return list(outbound)

    def classify(self, url: str) -> ClassifiedLink:
        host = hostname_of(url)

        platform = match_platform(host, self.rules.social)
        if platform:
            return SocialPreview(platform=platform, url=url)

        platform = match_platform(host, self.rules.community)
        if platform:
            return CommunityPreview(platform=platform, url=url)

        return ShopPreview(
            url=url,
            domain=host,
            title=title_from_path(url, DEFAULT_SHOP_TITLE),
        )

    def process(self, candidates: Iterable[str], profile_url: str) -> List[ClassifiedLink]:
        return [self.classify(url) for url in self.outbound_links(candidates, profile_url)]


def group(classified: Iterable[ClassifiedLink]) -> ClassifiedLinks:
    grouped = ClassifiedLinks()
    for link in classified:
        if isinstance(link, SocialPreview):
            grouped.social.append(link)
        elif isinstance(link, CommunityPreview):
            grouped.community.append(link)
        else:
            grouped.affiliate_shop.append(link)
    return grouped
