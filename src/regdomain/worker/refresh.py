"""Public Suffix List download, index build and periodic refresh."""
import asyncio
import logging
from typing import Optional

import httpx

from regdomain.config import Settings, settings as default_settings
from regdomain.suffix.index import SuffixIndex, build_index
from regdomain.suffix.persistence import save_to_file
from regdomain.suffix.resolver import DomainResolver
from regdomain.suffix.rules import clean_psl_text, parse_rules

logger = logging.getLogger(__name__)


class PSLDownloadError(Exception):
    """The Public Suffix List could not be downloaded."""
    pass


def download_psl(url: str, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> str:
    """
    Download the raw Public Suffix List document.

    Raises:
        PSLDownloadError: On transport errors, non-2xx responses or an empty body
    """
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout, follow_redirects=True)

    try:
        response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise PSLDownloadError(f"PSL download failed with HTTP {e.response.status_code}: {url}") from e
    except httpx.RequestError as e:
        raise PSLDownloadError(f"PSL download failed: {e}") from e
    finally:
        if owns_client:
            client.close()

    text = response.text
    if not text.strip():
        raise PSLDownloadError(f"PSL download returned an empty document: {url}")

    logger.info(f"Downloaded PSL from {url} ({len(text)} chars)")
    return text


def build_from_text(text: str, include_private: bool = True) -> SuffixIndex:
    """Clean, parse and index a raw PSL document."""
    lines = clean_psl_text(text, include_private=include_private)
    parsed = parse_rules(lines)

    if parsed.rejected:
        logger.warning(f"Skipped {len(parsed.rejected)} malformed PSL rules")

    return build_index(parsed.rules)


def refresh_index(settings: Settings = default_settings, client: Optional[httpx.Client] = None) -> SuffixIndex:
    """
    Download the PSL, build a fresh index and persist it.

    Recommended about once a week; the list changes slowly and the
    download is comparatively expensive.
    """
    text = download_psl(settings.psl_url, client=client, timeout=settings.download_timeout_seconds)
    index = build_from_text(text, include_private=settings.include_private_domains)
    save_to_file(index, settings.index_path)
    return index


class RefreshScheduler:
    """Scheduler that periodically rebuilds the suffix index."""

    def __init__(self, resolver: DomainResolver, settings: Settings = default_settings,
                 client: Optional[httpx.Client] = None):
        self.resolver = resolver
        self.settings = settings
        self.client = client
        self.running = False

    async def refresh_once(self) -> SuffixIndex:
        """Build a new index off the event loop and swap it into the resolver."""
        index = await asyncio.to_thread(refresh_index, self.settings, self.client)
        self.resolver.swap(index)
        return index

    async def run(self) -> None:
        """Run refresh scheduler loop."""
        logger.info(f"Starting index refresh scheduler (interval: {self.settings.refresh_interval_seconds}s)")

        self.running = True

        while self.running:
            # Wait first: startup already loaded or built an index
            await asyncio.sleep(self.settings.refresh_interval_seconds)
            if not self.running:
                break

            try:
                await self.refresh_once()
            except PSLDownloadError as e:
                logger.error(f"Index refresh skipped, keeping current index: {e}")
            except Exception as e:
                logger.error(f"Error in index refresh: {e}", exc_info=True)

    def stop(self) -> None:
        """Stop the refresh scheduler."""
        self.running = False
