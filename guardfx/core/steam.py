"""Steam Guard code generation.

Steam Guard codes are a TOTP variant: HMAC-SHA1 over the 30-second
counter, dynamically truncated, then rendered as five characters from a
26-symbol alphabet instead of decimal digits.
"""

from __future__ import annotations

import base64
import binascii
import struct
import time as _time

from cryptography.hazmat.primitives import hashes, hmac

from guardfx.core.models import PERIOD_SECONDS

# Symbols a Steam Guard code is drawn from
CODE_ALPHABET = "23456789BCDFGHJKMNPQRTVWXY"
CODE_LENGTH = 5


class SecretDecodeError(ValueError):
    """Raised when a shared secret is not valid base64."""


def current_time() -> int:
    """Return the current Unix time in whole seconds."""
    return int(_time.time())


def clean_secret(shared_secret: str) -> str:
    """Strip whitespace and surrounding quotes pasted along with a secret."""
    return shared_secret.strip().strip('"').strip("'")


def decode_secret(shared_secret: str) -> bytes:
    """Decode a base64 shared secret.

    Raises:
        SecretDecodeError: If the secret is not valid base64.
    """
    try:
        return base64.b64decode(clean_secret(shared_secret), validate=True)
    except (binascii.Error, ValueError) as e:
        raise SecretDecodeError(f"Failed to decode Base64: {e}") from e


def generate_code(shared_secret: str, timestamp: int | None = None) -> str:
    """Generate the Steam Guard code valid at a given time.

    Args:
        shared_secret: Base64 encoded shared secret.
        timestamp: Unix time in seconds. Defaults to now.

    Returns:
        Five character code.

    Raises:
        SecretDecodeError: If the secret is not valid base64.
    """
    if timestamp is None:
        timestamp = current_time()

    key = decode_secret(shared_secret)
    counter = struct.pack(">Q", timestamp // PERIOD_SECONDS)

    mac = hmac.HMAC(key, hashes.SHA1())  # nosec B303 - mandated by the Steam Guard scheme
    mac.update(counter)
    digest = mac.finalize()

    offset = digest[19] & 0x0F
    code_point = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF

    chars = []
    for _ in range(CODE_LENGTH):
        code_point, index = divmod(code_point, len(CODE_ALPHABET))
        chars.append(CODE_ALPHABET[index])
    return "".join(chars)
