from __future__ import annotations

import logging
from typing import Mapping

import httpx
from pydantic import BaseModel, ValidationError

from cloudreg.domain.entities import (
    CloudProvider,
    Failed,
    FailureReason,
    NotApplicable,
    Verified,
    VerificationOutcome,
)
from cloudreg.domain.errors import MalformedInstanceDocument
from cloudreg.domain.ports.instance_verifier import InstanceVerifierPort, ProviderPort
from cloudreg.domain.services import same_address

logger = logging.getLogger("cloudreg.infrastructure.verification.http_verifier")

_MALFORMED_STATUSES = {400, 422}
_REJECTED_STATUSES = {401, 403, 404}


class ProviderVerdict(BaseModel):
    """Normalized body every provider verification endpoint answers with."""

    valid: bool
    billable: bool = True
    instance_address: str | None = None
    billing_account_id: str | None = None


class HttpInstanceVerifier(InstanceVerifierPort):
    """
    Sends the instance document to the claimed provider's verification
    endpoint and folds every possible answer into a VerificationOutcome.

    Exactly one request per call, no retries. The client's timeout bounds
    the call; a timeout is reported like any other transport failure.
    """

    def __init__(
        self,
        providers: Mapping[CloudProvider, ProviderPort],
        *,
        client: httpx.AsyncClient,
    ) -> None:
        self._providers = dict(providers)
        self._client = client

    async def verify(
        self,
        provider: CloudProvider,
        source_address: str,
        document: str | None,
    ) -> VerificationOutcome:
        if document is None:
            return NotApplicable()

        impl = self._providers.get(provider)
        if impl is None:
            logger.error(
                "no verification endpoint configured",
                extra={"provider": provider.value},
            )
            return Failed(FailureReason.PROVIDER_UNREACHABLE)

        try:
            payload = impl.prepare(document)
        except MalformedInstanceDocument as e:
            logger.info(
                "malformed instance document",
                extra={"provider": provider.value, "error": str(e)},
            )
            return Failed(FailureReason.MALFORMED_DOCUMENT)

        try:
            resp = await self._client.post(
                impl.verify_url,
                json={**payload, "source_address": source_address},
            )
        except httpx.HTTPError as e:
            logger.warning(
                "verification endpoint unreachable",
                extra={"provider": provider.value, "error": repr(e)},
            )
            return Failed(FailureReason.PROVIDER_UNREACHABLE)

        return self._interpret(provider, source_address, resp)

    def _interpret(
        self, provider: CloudProvider, source_address: str, resp: httpx.Response
    ) -> VerificationOutcome:
        if resp.status_code in _MALFORMED_STATUSES:
            return Failed(FailureReason.MALFORMED_DOCUMENT)
        if resp.status_code in _REJECTED_STATUSES:
            return Failed(FailureReason.PROVIDER_REJECTED)
        if not (200 <= resp.status_code < 300):
            logger.warning(
                "verification endpoint error",
                extra={
                    "provider": provider.value,
                    "status": resp.status_code,
                    "body": resp.text[:200],
                },
            )
            return Failed(FailureReason.PROVIDER_UNREACHABLE)

        try:
            verdict = ProviderVerdict.model_validate_json(resp.content)
        except ValidationError:
            logger.warning(
                "unparseable verification response",
                extra={"provider": provider.value, "body": resp.text[:200]},
            )
            return Failed(FailureReason.PROVIDER_UNREACHABLE)

        if not verdict.valid:
            return Failed(FailureReason.PROVIDER_REJECTED)
        if not verdict.billable:
            return NotApplicable()
        if (
            verdict.instance_address is not None
            and not same_address(verdict.instance_address, source_address)
        ):
            return Failed(FailureReason.ADDRESS_MISMATCH)
        return Verified(billing_account_id=verdict.billing_account_id)
