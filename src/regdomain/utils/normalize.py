"""URL to hostname normalization ahead of suffix matching."""

SCHEME_PREFIXES = ("https://", "http://")
WWW_PREFIX = "www."


def strip_scheme(url: str) -> str:
    """Remove a leading http:// or https:// (case-insensitive)."""
    lowered = url.lower()
    for prefix in SCHEME_PREFIXES:
        if lowered.startswith(prefix):
            return url[len(prefix):]
    return url


def strip_path(url: str) -> str:
    """Remove everything from the first '/' onward."""
    return url.split("/", 1)[0]


def strip_www(host: str) -> str:
    """Remove one leading 'www.' label if the host has at least 4 characters."""
    if len(host) < 4:
        return host
    if host[:4].lower() == WWW_PREFIX:
        return host[4:]
    return host


def normalize_url(url: str) -> str:
    """
    Reduce a URL to the bare hostname the resolver expects.
    
    - Convert to lowercase
    - Remove http:// or https://
    - Remove path, starting at the first '/'
    - Remove a single leading 'www.'
    
    Examples:
        - HTTPS://WWW.Example.com/path -> example.com
        - www.www.example.com -> www.example.com
    """
    if not url:
        return ""
    host = url.strip().lower()
    host = strip_scheme(host)
    host = strip_path(host)
    return strip_www(host)
