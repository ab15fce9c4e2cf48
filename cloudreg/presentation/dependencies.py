from typing import Callable

from fastapi import Request

from cloudreg.domain.entities import CloudProvider
from cloudreg.domain.ports.instance_verifier import InstanceVerifierPort
from cloudreg.domain.ports.repository_artifacts import RepositoryArtifactPort
from cloudreg.domain.ports.system_repository import SystemRepositoryPort
from cloudreg.domain.ports.verification_cache import VerificationCachePort
from cloudreg.infrastructure.artifacts.filesystem_probe import FileSystemArtifactProbe
from cloudreg.infrastructure.db.pool import get_pool
from cloudreg.infrastructure.db.systems_repo import PgSystemRepository
from cloudreg.infrastructure.security.credentials import verify_system_password
from cloudreg.settings import get_settings


def get_system_repository() -> SystemRepositoryPort:
    return PgSystemRepository(get_pool())


def get_verification_cache(request: Request) -> VerificationCachePort:
    # This is set in cloudreg.main lifespan()
    return request.app.state.verification_cache


def get_instance_verifier(request: Request) -> InstanceVerifierPort:
    # This is set in cloudreg.main lifespan()
    return request.app.state.instance_verifier


def get_artifact_probe() -> RepositoryArtifactPort:
    return FileSystemArtifactProbe(get_settings().repo_cache_dir)


def get_verify_password() -> Callable[[str, str], bool]:
    return verify_system_password


def get_default_provider() -> CloudProvider:
    return get_settings().default_cloud_provider


def get_service_url_scheme() -> str:
    return get_settings().service_url_scheme
