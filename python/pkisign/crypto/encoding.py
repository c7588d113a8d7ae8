"""base64url, hex and UTF-8 conversions used by the JOSE and X.509 layers."""

import base64
import binascii
import re

from pkisign.crypto import error

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*\Z")


def b64url_encode(data):
    """Encodes bytes (or a UTF-8 string) as unpadded base64url text."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text):
    """Decodes unpadded base64url text into bytes.

    Raises:
        error.EncodingError: the text is not valid base64url.
    """
    if isinstance(text, bytes):
        text = text.decode("ascii", "replace")
    # urlsafe_b64decode silently skips characters outside the alphabet.
    if not _B64URL_RE.match(text):
        raise error.EncodingError("Invalid base64url data %r" % (text,))
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError, UnicodeEncodeError) as e:
        raise error.EncodingError("Invalid base64url data %r: %s" % (text, e))


def b64_decode(text):
    """Decodes standard (padded) base64 text into bytes.

    Raises:
        error.EncodingError: the text is not valid base64.
    """
    if isinstance(text, str):
        text = text.encode("ascii", "replace")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise error.EncodingError("Invalid base64 data: %s" % e)


def b64url_to_utf8(text):
    try:
        return b64url_decode(text).decode("utf-8")
    except UnicodeDecodeError as e:
        raise error.EncodingError("base64url data is not UTF-8: %s" % e)


def hex_to_bytes(hex_string):
    """Converts a hex string into bytes.

    Raises:
        error.EncodingError: odd length or non-hex characters.
    """
    try:
        return binascii.unhexlify(hex_string)
    except (binascii.Error, TypeError, ValueError) as e:
        raise error.EncodingError("Invalid hex string %r: %s" %
                                  (hex_string, e))


def bytes_to_hex(data):
    return binascii.hexlify(data).decode("ascii")


def hex_to_b64url(hex_string):
    return b64url_encode(hex_to_bytes(hex_string))


def b64url_to_hex(text):
    return bytes_to_hex(b64url_decode(text))


def is_hex(value):
    """True if value is a non-empty, even-length string of hex digits."""
    if not isinstance(value, str) or not value or len(value) % 2:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    # int() tolerates a sign, whitespace and underscores.
    return all(c in "0123456789abcdefABCDEF" for c in value)
