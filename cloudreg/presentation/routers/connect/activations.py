import logging
from typing import Annotated, Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from cloudreg.application.list_activations import list_activations
from cloudreg.domain.entities import CloudProvider
from cloudreg.domain.errors import InstanceVerificationFailed, InvalidCredentials
from cloudreg.domain.ports.instance_verifier import InstanceVerifierPort
from cloudreg.domain.ports.repository_artifacts import RepositoryArtifactPort
from cloudreg.domain.ports.system_repository import SystemRepositoryPort
from cloudreg.domain.ports.verification_cache import VerificationCachePort
from cloudreg.domain.services import build_service_url
from cloudreg.presentation.dependencies import (
    get_artifact_probe,
    get_default_provider,
    get_instance_verifier,
    get_service_url_scheme,
    get_system_repository,
    get_verification_cache,
    get_verify_password,
)
from cloudreg.schemas.responses import ActivationOut, ProductOut, ServiceOut

logger = logging.getLogger("cloudreg.presentation.routers.connect.activations")

router = APIRouter(prefix="/systems", tags=["Systems"])
security = HTTPBasic()


@router.get("/activations", response_model=list[ActivationOut])
async def get_activations(
    request: Request,
    creds: Annotated[HTTPBasicCredentials, Depends(security)],
    systems: Annotated[SystemRepositoryPort, Depends(get_system_repository)],
    cache: Annotated[VerificationCachePort, Depends(get_verification_cache)],
    verifier: Annotated[InstanceVerifierPort, Depends(get_instance_verifier)],
    artifacts: Annotated[RepositoryArtifactPort, Depends(get_artifact_probe)],
    verify_password: Annotated[
        Callable[[str, str], bool], Depends(get_verify_password)
    ],
    default_provider: Annotated[CloudProvider, Depends(get_default_provider)],
    scheme: Annotated[str, Depends(get_service_url_scheme)],
    x_instance_data: Annotated[str | None, Header()] = None,
    x_instance_provider: Annotated[str | None, Header()] = None,
):
    source_address = request.client.host if request.client else ""
    try:
        result = await list_activations(
            systems=systems,
            cache=cache,
            verifier=verifier,
            artifacts=artifacts,
            login=creds.username,
            password=creds.password,
            source_address=source_address,
            verify_password=verify_password,
            instance_data=x_instance_data,
            provider_hint=x_instance_provider,
            default_provider=default_provider,
        )
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    except InstanceVerificationFailed as e:
        # the reason stays in our logs; clients only learn that it failed
        logger.info(
            "activation listing denied",
            extra={"login": creds.username, "reason": e.reason.value},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instance verification failed",
        )

    return [
        ActivationOut(
            id=activation.id,
            system_id=activation.system_id,
            status=activation.status,
            service=ServiceOut(
                id=activation.service_id,
                name=activation.service_name,
                url=build_service_url(
                    scheme, activation.service_name, activation.service_id
                ),
                product=ProductOut(
                    id=activation.product.id,
                    identifier=activation.product.identifier,
                    version=activation.product.version,
                    arch=activation.product.arch,
                ),
            ),
        )
        for activation in result.activations
    ]
