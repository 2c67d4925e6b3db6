"""Helpers that derive identifiers: primary keys, URL slugs and certificate numbers."""

import re
import secrets
import string
import time
import uuid

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_CERT_ALPHABET = string.ascii_uppercase + string.digits


def new_id() -> str:
    return str(uuid.uuid4())


def epoch_millis() -> int:
    return int(time.time() * 1000)


def short_token(length: int = 8) -> str:
    """Random lower-case hex string, used to keep same-millisecond names apart."""
    return secrets.token_hex((length + 1) // 2)[:length]


def slugify(value: str) -> str:
    """Lower-case ``value`` and collapse every run of non ``[a-z0-9]`` into ``-``.

    >>> slugify("  Python: Zero to Hero! ")
    'python-zero-to-hero'
    """
    return _NON_SLUG.sub("-", value.lower()).strip("-")


def certificate_number() -> str:
    """``CERT-<epoch millis>-<6 upper-case alphanumerics>``."""
    suffix = "".join(secrets.choice(_CERT_ALPHABET) for _ in range(6))
    return f"CERT-{epoch_millis()}-{suffix}"
