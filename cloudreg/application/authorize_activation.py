import logging

from cloudreg.domain.entities import (
    ActivationRequest,
    CloudProvider,
    Failed,
    FailureReason,
    GateDecision,
    GatePath,
    NotApplicable,
    ScopeHint,
    Verified,
)
from cloudreg.domain.errors import VerificationCacheUnavailable
from cloudreg.domain.ports.instance_verifier import InstanceVerifierPort
from cloudreg.domain.ports.repository_artifacts import RepositoryArtifactPort
from cloudreg.domain.ports.verification_cache import VerificationCachePort
from cloudreg.domain.services import resolve_provider

logger = logging.getLogger("cloudreg.application.authorize_activation")


async def authorize_activation(
    request: ActivationRequest,
    *,
    cache: VerificationCachePort,
    verifier: InstanceVerifierPort,
    artifacts: RepositoryArtifactPort,
    default_provider: CloudProvider = CloudProvider.AWS,
) -> GateDecision:
    """
    Decide whether the caller is entitled to repository access right now.

    Callers without an instance document are ordinary systems and pass
    straight through. Cloud callers are served from the verification cache
    when a fresh record exists; otherwise the provider is asked once and
    only a successful answer is written back.
    """
    key = request.key
    log_ctx = {"cache_name": key.cache_name}

    document = request.instance_metadata_document
    if document is None or not document.strip():
        logger.debug("no instance data; bypassing verification", extra=log_ctx)
        return GateDecision(allowed=True, path=GatePath.BYPASSED)

    try:
        record = await cache.lookup(key)
    except VerificationCacheUnavailable as e:
        # treated as a miss: the provider is still the source of truth
        logger.warning(
            "verification cache lookup failed",
            extra={**log_ctx, "error": str(e)},
        )
        record = None
    if record is not None:
        logger.debug("instance verification cache hit", extra=log_ctx)
        return GateDecision(
            allowed=True,
            path=GatePath.CACHE_HIT,
            billing_account_id=record.billing_account_id,
        )

    provider = resolve_provider(request.cloud_provider_hint, default_provider)
    if provider is None:
        outcome = Failed(FailureReason.MALFORMED_DOCUMENT)
    else:
        log_ctx["provider"] = provider.value
        outcome = await verifier.verify(provider, request.source_address, document)

    if isinstance(outcome, Verified):
        # an already materialized listing only needs its registry view refreshed
        if await artifacts.exists(key):
            scope_hint = ScopeHint.REGISTRY
        else:
            scope_hint = ScopeHint.FULL
        try:
            await cache.store(key, outcome, scope_hint)
        except VerificationCacheUnavailable as e:
            logger.warning(
                "verification cache store failed",
                extra={**log_ctx, "error": str(e)},
            )
        logger.info(
            "instance verified",
            extra={**log_ctx, "scope": scope_hint.value},
        )
        return GateDecision(
            allowed=True,
            path=GatePath.VERIFIED,
            billing_account_id=outcome.billing_account_id,
        )

    if isinstance(outcome, NotApplicable):
        logger.info("instance is not marketplace billed; bypassing", extra=log_ctx)
        return GateDecision(allowed=True, path=GatePath.BYPASSED)

    logger.warning(
        "instance verification failed",
        extra={**log_ctx, "reason": outcome.reason.value},
    )
    if outcome.reason is FailureReason.ADDRESS_MISMATCH:
        try:
            await cache.invalidate(key)
        except VerificationCacheUnavailable as e:
            logger.warning(
                "verification cache invalidate failed",
                extra={**log_ctx, "error": str(e)},
            )
    return GateDecision(allowed=False, failure=outcome.reason)
