from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from cloudreg.domain.entities import CloudProvider
from cloudreg.domain.errors import MalformedInstanceDocument
from cloudreg.domain.ports.instance_verifier import ProviderPort


def _b64decode(value: str) -> bytes:
    """Accept both standard and urlsafe alphabets, padding optional."""
    value = value.strip()
    padded = value + "=" * (-len(value) % 4)
    try:
        if "-" in value or "_" in value:
            return base64.urlsafe_b64decode(padded)
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInstanceDocument("document is not base64") from e


def _b64_json(value: str) -> dict[str, Any]:
    try:
        decoded = json.loads(_b64decode(value))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedInstanceDocument("document is not JSON") from e
    if not isinstance(decoded, dict):
        raise MalformedInstanceDocument("document is not a JSON object")
    return decoded


def _require_str(doc: dict[str, Any], field: str) -> str:
    value = doc.get(field)
    if not isinstance(value, str) or not value:
        raise MalformedInstanceDocument(f"missing {field!r}")
    return value


class AwsProvider(ProviderPort):
    """
    X-Instance-Data is base64(JSON) carrying the IMDS identity document and
    its signature:  {"document": "<identity json>", "signature": "<pkcs7>"}
    """

    tag = CloudProvider.AWS

    def __init__(self, verify_url: str) -> None:
        self.verify_url = verify_url

    def prepare(self, document: str) -> dict[str, Any]:
        doc = _b64_json(document)
        return {
            "document": _require_str(doc, "document"),
            "signature": _require_str(doc, "signature"),
        }


class GceProvider(ProviderPort):
    """X-Instance-Data is the instance identity token (a signed JWT)."""

    tag = CloudProvider.GCE

    def __init__(self, verify_url: str) -> None:
        self.verify_url = verify_url

    def prepare(self, document: str) -> dict[str, Any]:
        token = document.strip()
        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise MalformedInstanceDocument("identity token is not a JWT")
        header = _b64_json(segments[0])
        if "alg" not in header:
            raise MalformedInstanceDocument("identity token header has no alg")
        return {"token": token}


class AzureProvider(ProviderPort):
    """X-Instance-Data is base64(JSON) of the attested metadata document."""

    tag = CloudProvider.AZURE

    def __init__(self, verify_url: str) -> None:
        self.verify_url = verify_url

    def prepare(self, document: str) -> dict[str, Any]:
        doc = _b64_json(document)
        return {
            "signature": _require_str(doc, "signature"),
            "encoding": doc.get("encoding", "pkcs7"),
        }


def build_providers(
    *,
    aws_verify_url: str | None = None,
    gce_verify_url: str | None = None,
    azure_verify_url: str | None = None,
) -> dict[CloudProvider, ProviderPort]:
    """Providers for every vendor that has a verification endpoint configured."""
    providers: dict[CloudProvider, ProviderPort] = {}
    if aws_verify_url:
        providers[CloudProvider.AWS] = AwsProvider(aws_verify_url)
    if gce_verify_url:
        providers[CloudProvider.GCE] = GceProvider(gce_verify_url)
    if azure_verify_url:
        providers[CloudProvider.AZURE] = AzureProvider(azure_verify_url)
    return providers
