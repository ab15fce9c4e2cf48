import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from cloudreg.domain.entities import CloudProvider, System
from cloudreg.infrastructure.artifacts.filesystem_probe import FileSystemArtifactProbe
from cloudreg.infrastructure.verification.http_verifier import HttpInstanceVerifier
from cloudreg.infrastructure.verification.providers import build_providers
from cloudreg.main import create_app
from cloudreg.presentation.dependencies import (
    get_artifact_probe,
    get_default_provider,
    get_instance_verifier,
    get_service_url_scheme,
    get_system_repository,
    get_verification_cache,
    get_verify_password,
)
from tests.fakes import FakeSystemRepo, FakeVerificationCache, make_activation


class ProviderEndpoint:
    """Stand-in for a provider verification endpoint behind httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.response = httpx.Response(200, json={"valid": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


@pytest.fixture()
def app_and_deps(tmp_path):
    app = create_app()
    systems = FakeSystemRepo()
    systems.add(
        System(id=7, login="SCC_abc"),
        "hashed-s3cret",
        [make_activation(product_id=1575, service_id=42)],
    )
    cache = FakeVerificationCache()
    endpoint = ProviderEndpoint()
    verifier = HttpInstanceVerifier(
        build_providers(aws_verify_url="http://verify.local/aws"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(endpoint)),
    )
    artifacts = FileSystemArtifactProbe(tmp_path / "repo" / "cache")

    app.dependency_overrides[get_system_repository] = lambda: systems
    app.dependency_overrides[get_verification_cache] = lambda: cache
    app.dependency_overrides[get_instance_verifier] = lambda: verifier
    app.dependency_overrides[get_artifact_probe] = lambda: artifacts
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed == "hashed-" + plain
    )
    app.dependency_overrides[get_default_provider] = lambda: CloudProvider.AWS
    app.dependency_overrides[get_service_url_scheme] = lambda: "susecloud"

    try:
        yield app, {
            "systems": systems,
            "cache": cache,
            "endpoint": endpoint,
            "repo_cache": tmp_path / "repo" / "cache",
        }
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


def basic_auth(login: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{login}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def aws_instance_data() -> str:
    doc = '{"document": "{\\"instanceId\\": \\"i-1\\"}", "signature": "MIAG"}'
    return base64.b64encode(doc.encode()).decode()
