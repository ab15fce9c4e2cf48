from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class CloudProvider(str, Enum):
    AWS = "aws"
    GCE = "gce"
    AZURE = "azure"


class ScopeHint(str, Enum):
    FULL = "full"
    REGISTRY = "registry"


class FailureReason(str, Enum):
    MALFORMED_DOCUMENT = "malformed_document"
    PROVIDER_UNREACHABLE = "provider_unreachable"
    PROVIDER_REJECTED = "provider_rejected"
    ADDRESS_MISMATCH = "address_mismatch"


class GatePath(str, Enum):
    BYPASSED = "bypassed"
    CACHE_HIT = "cache_hit"
    VERIFIED = "verified"


@dataclass(frozen=True)
class VerificationKey:
    source_address: str
    account_login: str
    product_id: int

    @property
    def cache_name(self) -> str:
        """Name shared by the cache entry and the materialized repository artifact."""
        return f"{self.source_address}-{self.account_login}-{self.product_id}"


@dataclass(frozen=True)
class ActivationRequest:
    source_address: str
    account_login: str
    product_id: int
    instance_metadata_document: str | None = None
    cloud_provider_hint: str | None = None

    @property
    def key(self) -> VerificationKey:
        return VerificationKey(self.source_address, self.account_login, self.product_id)


@dataclass(frozen=True)
class VerificationRecord:
    key: VerificationKey
    verified_at: datetime
    billing_account_id: str | None = None
    registry_scoped: bool = False

    def is_fresh(self, now: datetime, window: timedelta) -> bool:
        return now - self.verified_at < window


# Outcomes of a single call to the verification client.


@dataclass(frozen=True)
class NotApplicable:
    pass


@dataclass(frozen=True)
class Verified:
    billing_account_id: str | None = None


@dataclass(frozen=True)
class Failed:
    reason: FailureReason


VerificationOutcome = NotApplicable | Verified | Failed


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    path: GatePath | None = None
    billing_account_id: str | None = None
    failure: FailureReason | None = None


# Records owned by the system repository collaborator.


@dataclass
class System:
    id: int
    login: str


@dataclass
class Product:
    id: int
    identifier: str
    version: str
    arch: str


@dataclass
class Activation:
    id: int
    system_id: int
    service_id: int
    service_name: str
    product: Product
    status: str = "ACTIVE"
