"""FastAPI application and endpoints."""
import asyncio
import logging
from pathlib import Path
from typing import List
from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.responses import JSONResponse

from regdomain.config import settings
from regdomain.api.schemas import BatchLookupRequest, DomainResult, ErrorResponse, HealthResponse, IndexStats
from regdomain.suffix.index import SuffixIndex
from regdomain.suffix.persistence import IndexDecodeError, load_from_file
from regdomain.suffix.resolver import DomainResolver, IndexNotLoadedError, is_public_suffix, lookup, public_suffix
from regdomain.utils.logging import setup_logging
from regdomain.utils.normalize import normalize_url
from regdomain.worker.refresh import PSLDownloadError, RefreshScheduler

# Configure logging
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Registrable Domain Service",
    description="eTLD+1 extraction backed by the Public Suffix List",
    version="1.0.0"
)

app.state.resolver = DomainResolver()
app.state.scheduler = RefreshScheduler(app.state.resolver, settings)
app.state.scheduler_task = None


def load_persisted_index(resolver: DomainResolver) -> bool:
    """Load the index file into the resolver, warning when it is missing."""
    index_path = Path(settings.index_path)

    if not index_path.exists():
        logger.warning(
            f"No suffix index at {index_path}; run 'python -m regdomain.worker.main' to build one"
        )
        return False

    try:
        resolver.swap(load_from_file(index_path))
        return True
    except (IndexDecodeError, OSError) as e:
        logger.error(f"Suffix index at {index_path} is unreadable: {e}")
        return False


@app.on_event("startup")
async def startup_event():
    """Load or build the suffix index and start the refresh scheduler."""
    logger.info("Starting Registrable Domain API service")
    settings.ensure_directories()

    resolver: DomainResolver = app.state.resolver
    scheduler: RefreshScheduler = app.state.scheduler

    loaded = load_persisted_index(resolver)
    if not loaded and settings.build_on_startup:
        try:
            await scheduler.refresh_once()
        except (PSLDownloadError, OSError) as e:
            logger.error(f"Initial index build failed: {e}")

    if settings.refresh_enabled:
        app.state.scheduler_task = asyncio.create_task(scheduler.run())


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the refresh scheduler."""
    app.state.scheduler.stop()
    task = app.state.scheduler_task
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        app.state.scheduler_task = None


def get_resolver(request: Request) -> DomainResolver:
    """Resolver dependency."""
    return request.app.state.resolver


def index_stats(resolver: DomainResolver) -> IndexStats:
    if not resolver.is_loaded:
        return IndexStats(loaded=False)
    index = resolver.index
    return IndexStats(
        loaded=True,
        rule_count=index.rule_count,
        node_count=index.node_count,
        built_at=index.built_at
    )


def resolve_url(url: str, index: SuffixIndex) -> DomainResult:
    hostname = normalize_url(url)
    return DomainResult(
        url=url,
        hostname=hostname,
        registrable_domain=lookup(hostname, index),
        public_suffix=public_suffix(hostname, index),
        is_public_suffix=is_public_suffix(hostname, index)
    )


@app.get("/healthz", response_model=HealthResponse)
async def health_check(resolver: DomainResolver = Depends(get_resolver)):
    """Health check endpoint with index status."""
    stats = index_stats(resolver)
    return HealthResponse(
        status="healthy" if stats.loaded else "degraded",
        index=stats
    )


@app.get(
    "/v1/domains",
    response_model=DomainResult,
    responses={503: {"model": ErrorResponse}}
)
async def get_domain(
    url: str = Query(..., min_length=1, description="URL or hostname"),
    resolver: DomainResolver = Depends(get_resolver)
):
    """
    Resolve the registrable domain of a URL.

    Returns:
        Hostname, registrable domain and public suffix
    """
    return resolve_url(url, resolver.index)


@app.post(
    "/v1/domains:batch",
    response_model=List[DomainResult],
    responses={503: {"model": ErrorResponse}}
)
async def get_domains(request: BatchLookupRequest, resolver: DomainResolver = Depends(get_resolver)):
    """Resolve registrable domains for a batch of URLs against a single index."""
    index = resolver.index
    return [resolve_url(url, index) for url in request.urls]


@app.post(
    "/v1/index:refresh",
    response_model=IndexStats,
    responses={502: {"model": ErrorResponse}}
)
async def refresh(request: Request):
    """
    Download the PSL and swap in a freshly built index.

    Returns:
        Stats of the new index
    """
    scheduler: RefreshScheduler = request.app.state.scheduler
    try:
        await scheduler.refresh_once()
    except PSLDownloadError as e:
        logger.warning(f"Index refresh failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return index_stats(scheduler.resolver)


@app.exception_handler(IndexNotLoadedError)
async def index_not_loaded_handler(request, exc):
    """No index yet: the service is up but cannot answer."""
    logger.warning(f"Lookup rejected: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "Index not loaded", "detail": str(exc)}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "regdomain.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False
    )
