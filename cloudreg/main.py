from contextlib import asynccontextmanager
from fastapi import FastAPI

from cloudreg.domain.ports.verification_cache import VerificationCachePort
from cloudreg.infrastructure.db.pool import get_pool, close_pool
from cloudreg.infrastructure.http.client import (
    close_http_client,
    open_http_client,
)
from cloudreg.infrastructure.memory_cache.verification_cache import (
    InMemoryVerificationCache,
)
from cloudreg.infrastructure.redis_cache.pool import get_redis, close_redis
from cloudreg.infrastructure.redis_cache.verification_cache import (
    RedisVerificationCache,
)
from cloudreg.infrastructure.verification.http_verifier import HttpInstanceVerifier
from cloudreg.infrastructure.verification.providers import build_providers
from cloudreg.logging import setup_logging
from cloudreg.presentation.api import api
from cloudreg.settings import Settings, get_settings

settings = get_settings()


def build_verification_cache(settings: Settings) -> VerificationCachePort:
    if settings.cache_backend == "memory":
        return InMemoryVerificationCache(
            ttl_seconds=settings.verification_ttl_seconds,
            registry_ttl_seconds=settings.registry_ttl_seconds,
        )
    return RedisVerificationCache(
        get_redis(),
        ttl_seconds=settings.verification_ttl_seconds,
        registry_ttl_seconds=settings.registry_ttl_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    pool = get_pool()
    if not getattr(pool, "is_open", False):
        await pool.open()

    client = await open_http_client(timeout=settings.verification_timeout_seconds)

    # ONE cache and ONE verifier per process, exposed to dependencies
    app.state.verification_cache = build_verification_cache(settings)
    app.state.instance_verifier = HttpInstanceVerifier(
        build_providers(
            aws_verify_url=settings.aws_verify_url,
            gce_verify_url=settings.gce_verify_url,
            azure_verify_url=settings.azure_verify_url,
        ),
        client=client,
    )

    try:
        yield
    finally:
        # shutdown
        await close_http_client()
        if settings.cache_backend == "redis":
            await close_redis()
        await close_pool()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(
        title="Cloud Instance Registration API", version="0.1.0", lifespan=lifespan
    )
    app.state.settings = settings
    app.include_router(api)
    return app


app = create_app()
