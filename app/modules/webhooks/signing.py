import hashlib
import hmac

SIGNATURE_HEADER = "X-Webhook-Signature"
EVENT_HEADER = "X-Webhook-Event"
USER_AGENT = "templatehub-webhooks/1.0"

def sign(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of the exact body bytes."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

def verify(secret: str, body: bytes, signature: str) -> bool:
    return hmac.compare_digest(sign(secret, body), signature or "")

def delivery_headers(event_name: str, body: bytes, secret: str | None = None) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        EVENT_HEADER: event_name,
        "User-Agent": USER_AGENT,
    }
    if secret:
        headers[SIGNATURE_HEADER] = sign(secret, body)
    return headers
