from __future__ import annotations

import base64
import hashlib
import hmac

from .errors import SigningError


def gen_sign(secret: str, timestamp: int) -> str:
    """Compute the webhook signature for ``timestamp``.

    The bot platform keys HMAC-SHA256 with ``"{timestamp}\\n{secret}"`` and
    MACs an empty message; the digest is sent base64 encoded.
    """
    try:
        string_to_sign = f"{int(timestamp)}\n{secret}"
        digest = hmac.new(string_to_sign.encode("utf-8"), b"", digestmod=hashlib.sha256).digest()
    except (TypeError, ValueError) as exc:
        raise SigningError(f"cannot sign with timestamp {timestamp!r}") from exc
    return base64.b64encode(digest).decode("utf-8")
