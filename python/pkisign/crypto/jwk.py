"""JSON Web Key thumbprints (RFC 7638)."""

import hashlib
import json

from pkisign.crypto import encoding
from pkisign.crypto import error

# The members that make up the thumbprint of each key type.
_REQUIRED_MEMBERS = {
    "RSA": ("e", "kty", "n"),
    "EC": ("crv", "kty", "x", "y"),
    "oct": ("k", "kty"),
    }


def get_thumbprint(jwk):
    """SHA-256 over the required members in lexicographic order.

    Raises:
        error.UnsupportedAlgorithmError: the kty is not RSA, EC or oct.
        error.EncodingError: a required member is missing or not a string.
    """
    kty = jwk.get("kty")
    try:
        members = _REQUIRED_MEMBERS[kty]
    except (KeyError, TypeError):
        raise error.UnsupportedAlgorithmError(
            "No JWK thumbprint for kty %r" % (kty,))
    canonical = {}
    for member in members:
        value = jwk.get(member)
        if not isinstance(value, str):
            raise error.EncodingError("JWK %s member %s must be a string" %
                                      (kty, member))
        canonical[member] = value
    data = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(data.encode("utf-8")).digest()


def get_thumbprint_b64u(jwk):
    return encoding.b64url_encode(get_thumbprint(jwk))
