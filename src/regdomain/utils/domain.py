"""Registrable domain (eTLD+1) extraction from URLs."""
import logging

from regdomain.suffix.resolver import DomainResolver
from regdomain.utils.normalize import normalize_url

logger = logging.getLogger(__name__)


def get_registrable_domain(url: str, resolver: DomainResolver) -> str:
    """
    Extract the registrable domain (eTLD+1) from a URL.
    
    Examples:
        - https://a.example.com/path -> example.com
        - https://www.example.co.uk/path -> example.co.uk
        - HTTPS://EXAMPLE.COM/PATH -> example.com
    
    Args:
        url: URL or bare hostname
        resolver: Resolver holding a loaded suffix index
        
    Returns:
        Registrable domain, or "" when nothing is left after normalization.
        A URL whose host is itself a public suffix comes back as that host.
        
    Raises:
        IndexNotLoadedError: If the resolver has no index yet
    """
    hostname = normalize_url(url)
    if not hostname:
        logger.debug(f"Nothing to resolve after normalizing {url!r}")
        return ""
    
    return resolver.lookup(hostname)
