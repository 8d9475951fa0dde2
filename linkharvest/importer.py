from typing import Any, Iterable, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from .models import (
    DEFAULT_SHOP_TITLE,
    CommunityEntry,
    ImportCounts,
    ImportPayload,
    ShopEntry,
    SocialEntry,
)
from .storage import LinkStore
from .url_utils import hostname_of

EntryT = TypeVar("EntryT", bound=BaseModel)


def _valid_entries(kind: str, entries: Iterable[Any], model: Type[EntryT]) -> Iterable[EntryT]:
    for raw in entries:
        try:
            yield model.model_validate(raw)
        except ValidationError as e:
            logger.debug(f"Skipping malformed {kind} entry {raw!r}: {e.error_count()} error(s)")


def community_title(platform: str) -> str:
    return f"Join my {platform}"


def import_links(store: LinkStore, user_id: str, links: ImportPayload) -> ImportCounts:
    """
    Merge a (possibly edited) extraction result into the user's collections.

    Social links are upserted per platform and always counted. Community and
    shop links are only inserted when new, and only new rows are counted.
    Malformed entries are skipped.
    """
    counts = ImportCounts()

    for entry in _valid_entries("social", links.social, SocialEntry):
        store.upsert_social(user_id, entry.platform.value, entry.url)
        counts.social += 1

    for entry in _valid_entries("community", links.community, CommunityEntry):
        platform = entry.platform.value
        if store.add_community(user_id, platform, entry.url, title=community_title(platform)):
            counts.community += 1

    for entry in _valid_entries("shop", links.affiliate_shop, ShopEntry):
        created = store.add_shop(
            user_id,
            entry.url,
            domain=entry.domain or _domain(entry.url),
            title=entry.title or DEFAULT_SHOP_TITLE,
            image_url=entry.image_url,
            price=entry.price,
            description=entry.description,
        )
        if created:
            counts.shop += 1

    logger.info(
        f"Imported links for user {user_id}: {counts.social} social, "
        f"{counts.community} community, {counts.shop} shop"
    )
    return counts


def _domain(url: str) -> Optional[str]:
    return hostname_of(url) or None
