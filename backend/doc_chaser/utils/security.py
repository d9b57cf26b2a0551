import hmac
import secrets


def generate_upload_token() -> str:
    return secrets.token_urlsafe(24)


def bearer_matches(authorization: str | None, secret: str) -> bool:
    if not authorization or not authorization.startswith("Bearer "):
        return False
    return hmac.compare_digest(authorization[7:], secret)
