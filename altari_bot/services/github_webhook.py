from __future__ import annotations

import hashlib
import hmac
from typing import Mapping
from urllib.parse import parse_qs

from altari_bot.errors import WebhookSignatureError

SHA256_HEADER = "x-hub-signature-256"
SHA1_HEADER = "x-hub-signature"

_DIGESTS = {
    "sha256": hashlib.sha256,
    "sha1": hashlib.sha1,
}


def _signature_header(headers: Mapping[str, str]) -> str:
    lowered = {k.lower(): v for k, v in headers.items()}
    return lowered.get(SHA256_HEADER) or lowered.get(SHA1_HEADER) or ""


def verify_signature(body: bytes, signature: str, secret: str) -> None:
    if not secret:
        raise WebhookSignatureError("webhook secret is not configured")
    if not signature:
        raise WebhookSignatureError("missing signature header")

    algorithm, _, received = signature.partition("=")
    digest = _DIGESTS.get(algorithm)
    if digest is None or not received:
        raise WebhookSignatureError(f"unsupported signature format: {algorithm!r}")

    expected = hmac.new(secret.encode("utf-8"), body, digest).hexdigest()
    if not hmac.compare_digest(expected, received.strip().lower()):
        raise WebhookSignatureError("payload signature does not match")


def extract_payload(body: bytes, content_type: str) -> bytes:
    """Form-encoded deliveries wrap the JSON document in a ``payload`` field."""
    if content_type.split(";")[0].strip().lower() == "application/x-www-form-urlencoded":
        values = parse_qs(body.decode("utf-8", errors="replace")).get("payload")
        return values[0].encode("utf-8") if values else b""
    return body


def validate_payload(body: bytes, headers: Mapping[str, str], secret: str) -> bytes:
    verify_signature(body, _signature_header(headers), secret)
    content_type = {k.lower(): v for k, v in headers.items()}.get("content-type", "")
    return extract_payload(body, content_type)
