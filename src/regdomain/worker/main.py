"""One-shot index build: download, clean, build and persist the PSL index."""
import logging
import sys

from regdomain.config import settings
from regdomain.utils.logging import setup_logging
from regdomain.worker.refresh import PSLDownloadError, refresh_index

logger = logging.getLogger(__name__)


def main() -> int:
    """Entry point for the build command."""
    setup_logging()
    settings.ensure_directories()

    logger.info(f"Building suffix index from {settings.psl_url}")
    try:
        index = refresh_index(settings)
    except PSLDownloadError as e:
        logger.error(f"Error downloading the PSL: {e}")
        return 1

    logger.info(f"Suffix index written to {settings.index_path}: {index.rule_count} rules, {index.node_count} nodes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
