from urllib.parse import urljoin, urlsplit

ALLOWED_SCHEMES = {"http", "https"}


class InvalidURLError(ValueError):
    """Raised by validate(); `code` is the error string returned to callers."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


def normalize_host(host: str | None) -> str:
    host = (host or "").lower().rstrip(".")
    if host.startswith("www."):
        return host[4:]
    return host


def domain_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def matches_any(host: str, domains) -> bool:
    return any(domain_matches(host, d) for d in domains)


def validate(raw_url: str) -> str:
    """
    Validate an absolute URL and return it stripped of surrounding whitespace.
    - empty or unparsable input -> invalid_url
    - scheme other than http/https -> invalid_protocol
    - missing host -> invalid_url
    """
    url = (raw_url or "").strip()
    if not url:
        raise InvalidURLError("invalid_url")
    try:
        parts = urlsplit(url)
        host = parts.hostname
        parts.port  # raises on a malformed port
    except ValueError:
        raise InvalidURLError("invalid_url")

    if not parts.scheme:
        raise InvalidURLError("invalid_url")
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURLError("invalid_protocol")
    if not host or any(c.isspace() for c in host):
        raise InvalidURLError("invalid_url")
    return url


def hostname_of(url: str) -> str:
    """`www.`-stripped, lower-cased host of an already validated URL."""
    return normalize_host(urlsplit(url).hostname)


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def resolve_relative(href: str, origin: str) -> str | None:
    """
    Turn a scraped href into an absolute http(s) URL string.
    - "/foo" and "//host/foo" are joined onto the profile origin
    - absolute URLs are returned as-is
    - anything else (relative paths, mailto:, javascript:) gives None
    """
    href = href.strip()
    if not href:
        return None
    if href.startswith("/"):
        href = urljoin(origin + "/", href)
    try:
        return validate(href)
    except InvalidURLError:
        return None


def title_from_path(url: str, default: str) -> str:
    """Last non-empty path segment with '-' and '_' read as spaces."""
    segments = [s for s in urlsplit(url).path.split("/") if s]
    if not segments:
        return default
    title = segments[-1].replace("-", " ").replace("_", " ").strip()
    return title or default
