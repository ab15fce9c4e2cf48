from dataclasses import dataclass
from typing import Callable

from cloudreg.application.authorize_activation import authorize_activation
from cloudreg.domain.entities import (
    Activation,
    ActivationRequest,
    CloudProvider,
    GateDecision,
)
from cloudreg.domain.errors import (
    InstanceVerificationFailed,
    InvalidCredentials,
)
from cloudreg.domain.ports.instance_verifier import InstanceVerifierPort
from cloudreg.domain.ports.repository_artifacts import RepositoryArtifactPort
from cloudreg.domain.ports.system_repository import SystemRepositoryPort
from cloudreg.domain.ports.verification_cache import VerificationCachePort


@dataclass(frozen=True)
class AuthorizedActivations:
    activations: list[Activation]
    decision: GateDecision


async def list_activations(
    systems: SystemRepositoryPort,
    cache: VerificationCachePort,
    verifier: InstanceVerifierPort,
    artifacts: RepositoryArtifactPort,
    login: str,
    password: str,
    source_address: str,
    verify_password: Callable[[str, str], bool],
    instance_data: str | None = None,
    provider_hint: str | None = None,
    default_provider: CloudProvider = CloudProvider.AWS,
) -> AuthorizedActivations:
    record = await systems.get_by_login_with_hash(login)
    if not record:
        raise InvalidCredentials()
    system, password_hash = record
    if not verify_password(password, password_hash):
        raise InvalidCredentials()

    activations = await systems.list_activations(system.id)
    if not activations:
        return AuthorizedActivations(
            activations=[], decision=GateDecision(allowed=True)
        )

    # the base product's activation is the one the verification is keyed on
    request = ActivationRequest(
        source_address=source_address,
        account_login=system.login,
        product_id=activations[0].product.id,
        instance_metadata_document=instance_data,
        cloud_provider_hint=provider_hint,
    )
    decision = await authorize_activation(
        request,
        cache=cache,
        verifier=verifier,
        artifacts=artifacts,
        default_provider=default_provider,
    )
    if not decision.allowed:
        raise InstanceVerificationFailed(decision.failure)

    return AuthorizedActivations(activations=activations, decision=decision)
