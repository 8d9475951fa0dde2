from pathlib import Path
from typing import Optional, Tuple

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict

# Link-in-bio builders we know how to scrape.
ALLOWED_DOMAINS = (
    "linktr.ee",
    "link.bio",
    "beacons.ai",
    "bio.site",
    "carrd.co",
    "taplink.cc",
)

# Affiliate redirectors and tracking hops that say nothing about the creator.
BLOCKED_DOMAINS = (
    "thanks.is",
    "kqzyfj.com",
    "armra.com",
    "omniluxled.com",
    "sjv.io",
    "linksynergy.com",
    "pxf.io",
    "equipfoods.com",
    "clearstem.com",
    "wk5q.net",
    "thezeroproof.com",
    "jlab.com",
)

# Ordered: the first matching domain decides the platform.
SOCIAL_PLATFORMS = (
    ("instagram.com", "instagram"),
    ("facebook.com", "facebook"),
    ("fb.com", "facebook"),
    ("twitter.com", "x"),
    ("x.com", "x"),
    ("linkedin.com", "linkedin"),
    ("tiktok.com", "tiktok"),
    ("youtube.com", "youtube"),
    ("youtu.be", "youtube"),
    ("pinterest.com", "pinterest"),
    ("snapchat.com", "snapchat"),
    ("threads.net", "threads"),
    ("medium.com", "medium"),
    ("twitch.tv", "twitch"),
    ("reddit.com", "reddit"),
)

COMMUNITY_PLATFORMS = (
    ("whatsapp.com", "whatsapp"),
    ("wa.me", "whatsapp"),
    ("t.me", "telegram"),
    ("telegram.me", "telegram"),
    ("telegram.org", "telegram"),
    ("discord.com", "discord"),
    ("discord.gg", "discord"),
    ("slack.com", "slack"),
    ("skype.com", "skype"),
    ("zoom.us", "zoom"),
)


class DomainRules(BaseModel):
    """Static domain tables. Frozen once built; pass it where it is needed."""

    model_config = ConfigDict(frozen=True)

    allowed_domains: Tuple[str, ...] = ALLOWED_DOMAINS
    blocked_domains: Tuple[str, ...] = BLOCKED_DOMAINS
    social: Tuple[Tuple[str, str], ...] = SOCIAL_PLATFORMS
    community: Tuple[Tuple[str, str], ...] = COMMUNITY_PLATFORMS


def _pairs(entries) -> Tuple[Tuple[str, str], ...]:
    pairs = []
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("domain") and entry.get("platform"):
            pairs.append((entry["domain"].lower(), entry["platform"]))
        else:
            logger.warning(f"Ignoring malformed platform rule: {entry!r}")
    return tuple(pairs)


def load_rules(rules_file: Optional[Path] = None) -> DomainRules:
    """
    Build the rule tables, overriding the built-in defaults with any section
    present in `rules_file`:

        allowed_domains: [linktr.ee, ...]
        blocked_domains: [thanks.is, ...]
        social:
          - {domain: instagram.com, platform: instagram}
        community:
          - {domain: t.me, platform: telegram}
    """
    if rules_file is None:
        return DomainRules()

    logger.info(f"Loading domain rules from: {rules_file}")
    with open(rules_file, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    overrides = {}
    for key in ("allowed_domains", "blocked_domains"):
        if key in config:
            overrides[key] = tuple(d.lower() for d in config[key] or [])
    for key in ("social", "community"):
        if key in config:
            overrides[key] = _pairs(config[key])

    rules = DomainRules(**overrides)
    logger.info(
        f"Loaded {len(rules.allowed_domains)} allowed, {len(rules.blocked_domains)} blocked, "
        f"{len(rules.social)} social and {len(rules.community)} community rules"
    )
    return rules
