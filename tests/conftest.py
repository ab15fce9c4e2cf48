import pytest

from cloudreg.domain.entities import (
    ActivationRequest,
    Failed,
    FailureReason,
    System,
    Verified,
)
from tests.fakes import (
    FakeArtifactProbe,
    FakeInstanceVerifier,
    FakeSystemRepo,
    FakeVerificationCache,
    make_activation,
)


@pytest.fixture()
def cache():
    return FakeVerificationCache()


@pytest.fixture()
def verifier_ok():
    return FakeInstanceVerifier(Verified(billing_account_id="acct-123"))


@pytest.fixture()
def verifier_rejects():
    return FakeInstanceVerifier(Failed(FailureReason.PROVIDER_REJECTED))


@pytest.fixture()
def artifacts():
    return FakeArtifactProbe()


@pytest.fixture()
def cloud_request():
    return ActivationRequest(
        source_address="10.0.0.5",
        account_login="SCC_abc",
        product_id=1575,
        instance_metadata_document="eyJkb2N1bWVudCI6ICJ7fSJ9",
    )


@pytest.fixture()
def systems():
    repo = FakeSystemRepo()
    repo.add(
        System(id=7, login="SCC_abc"),
        "hashed-s3cret",
        [make_activation(), make_activation(activation_id=2, product_id=1576)],
    )
    return repo


@pytest.fixture()
def verify_password_stub():
    return lambda plain, hashed: hashed == "hashed-" + plain
