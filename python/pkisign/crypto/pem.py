"""Read and write PEM armored DER."""

import base64
import binascii
import re

from pkisign.crypto import encoding
from pkisign.crypto import error


class PemError(error.EncodingError):
    """Raised when PEM armor is missing or malformed."""
    pass


BEGIN_MARKER = "-----BEGIN %s-----"
END_MARKER = "-----END %s-----"

# RFC 7468 mandates 64 base64 characters per line.
_LINE_LENGTH = 64

_PEM_RE = re.compile(r"-----BEGIN ([A-Z0-9 ]+)-----(.*?)-----END \1-----",
                     re.DOTALL)


def to_pem(der, marker):
    """Armors DER bytes.

    Args:
        der: the DER encoding.
        marker: the PEM label, e.g. "CERTIFICATE".

    Returns:
        the PEM string, terminated by a newline.
    """
    body = base64.b64encode(der).decode("ascii")
    lines = [BEGIN_MARKER % marker]
    lines.extend(body[i:i + _LINE_LENGTH]
                 for i in range(0, len(body), _LINE_LENGTH))
    lines.append(END_MARKER % marker)
    return "\n".join(lines) + "\n"


def pem_blocks(pem_string):
    """Yields (der, marker) for every PEM block in a string."""
    for match in _PEM_RE.finditer(pem_string):
        body = "".join(match.group(2).split())
        try:
            der = base64.b64decode(body.encode("ascii"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise PemError("Invalid base64 in %s block: %s" %
                           (match.group(1), e))
        yield der, match.group(1)


def from_pem(pem_string, markers):
    """Reads the first PEM block whose label is one of markers.

    Args:
        pem_string: PEM text, possibly with surrounding data.
        markers: an iterable of acceptable labels.

    Returns:
        a (der, marker) tuple.

    Raises:
        PemError: no block with an acceptable label was found.
    """
    if isinstance(pem_string, bytes):
        pem_string = pem_string.decode("ascii", "replace")
    markers = tuple(markers)
    for der, marker in pem_blocks(pem_string):
        if marker in markers:
            return der, marker
    raise PemError("No PEM block with label %s found" % " or ".join(markers))


def hex_to_pem(hex_string, marker):
    return to_pem(encoding.hex_to_bytes(hex_string), marker)


def pem_to_hex(pem_string, marker):
    der, _ = from_pem(pem_string, (marker,))
    return encoding.bytes_to_hex(der)
