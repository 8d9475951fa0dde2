from linkharvest.rules import ALLOWED_DOMAINS, SOCIAL_PLATFORMS, load_rules


def test_defaults_without_file():
    rules = load_rules(None)
    assert rules.allowed_domains == ALLOWED_DOMAINS
    assert rules.social == SOCIAL_PLATFORMS


def test_yaml_overrides_only_given_sections(tmp_path):
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text(
        """
allowed_domains: [Bio.Example]
social:
  - {domain: mastodon.social, platform: mastodon}
  - {domain: missing-platform.example}
  - {domain: instagram.com, platform: instagram}
"""
    )

    rules = load_rules(rules_file)

    assert rules.allowed_domains == ("bio.example",)
    assert rules.social == (("mastodon.social", "mastodon"), ("instagram.com", "instagram"))
    assert "thanks.is" in rules.blocked_domains
    assert ("t.me", "telegram") in rules.community
