"""Signatures and MACs named the Java way ("SHA256withRSA", "HmacSHA256").

Both classes accumulate data through update() and produce or check the
signature at the end:

    sig = signer.Signature("SHA256withECDSA")
    sig.init(private_key)
    sig.update(b"data")
    signature = sig.sign()
"""

import re

import ecdsa
import ecdsa.der
import ecdsa.util
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import padding

from pkisign.crypto import encoding
from pkisign.crypto import error
from pkisign.crypto import keys

_HASHES = {
    "MD5": hashes.MD5,
    "SHA1": hashes.SHA1,
    "SHA224": hashes.SHA224,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
    }

RSA = "RSA"
ECDSA = "ECDSA"
DSA = "DSA"
RSA_PSS = "RSAandMGF1"

_SIGNATURE_ALG_RE = re.compile(
    r"^(MD5|SHA1|SHA224|SHA256|SHA384|SHA512)with(RSA|ECDSA|DSA|RSAandMGF1)$")
_MAC_ALG_RE = re.compile(r"^Hmac(SHA1|SHA224|SHA256|SHA384|SHA512)$")

_KEY_CHECKS = {
    RSA: keys.is_rsa_key,
    RSA_PSS: keys.is_rsa_key,
    ECDSA: keys.is_ec_key,
    DSA: keys.is_dsa_key,
    }

# cryptography curve name -> curve of the ecdsa package.
_ECDSA_CURVES = {
    "secp256r1": ecdsa.NIST256p,
    "secp384r1": ecdsa.NIST384p,
    "secp521r1": ecdsa.NIST521p,
    "secp256k1": ecdsa.SECP256k1,
    }


def parse_signature_algorithm(alg):
    """Splits "SHA256withRSA" into ("SHA256", "RSA").

    Raises:
        error.UnsupportedAlgorithmError: not a supported combination.
    """
    match = _SIGNATURE_ALG_RE.match(alg or "")
    if not match:
        raise error.UnsupportedAlgorithmError(
            "Unsupported signature algorithm: %s" % alg)
    return match.groups()


class Signature(object):
    """A signing or verification operation over accumulated data."""

    def __init__(self, alg):
        """Initialize with a signature algorithm name.

        Args:
            alg: e.g. "SHA256withRSA", "SHA384withECDSA", "SHA256withDSA" or
                "SHA256withRSAandMGF1" (RSASSA-PSS, salt length equal to the
                hash length).

        Raises:
            error.UnsupportedAlgorithmError: unknown algorithm.
        """
        hash_name, self._key_alg = parse_signature_algorithm(alg)
        self._alg = alg
        self._hash = _HASHES[hash_name]()
        self._key = None
        self._data = []

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._alg)

    @property
    def alg(self):
        return self._alg

    def init(self, key, passphrase=None):
        """Sets the key: a private key to sign, a public key to verify.

        Args:
            key: a key object, PEM/DER key data or a certificate.
            passphrase: password of an encrypted private key.

        Raises:
            error.KeyTypeMismatchError: the key does not belong to the
                algorithm family.
        """
        key = keys.get_key(key, passphrase)
        if not _KEY_CHECKS[self._key_alg](key):
            raise error.KeyTypeMismatchError(
                "%s needs a %s key, got %s" %
                (self._alg, self._key_alg, type(key).__name__))
        self._key = key
        self._data = []
        return self

    def update(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._data.append(data)
        return self

    def _padding(self):
        if self._key_alg == RSA_PSS:
            return padding.PSS(mgf=padding.MGF1(self._hash),
                               salt_length=self._hash.digest_size)
        return padding.PKCS1v15()

    def sign(self):
        """Signs the accumulated data.

        Returns:
            the signature bytes. ECDSA and DSA signatures are DER encoded.

        Raises:
            error.MissingKeyError: init() was not called.
            error.KeyTypeMismatchError: the key is not a private key.
        """
        if self._key is None:
            raise error.MissingKeyError("Signature.init() was not called")
        if not keys.is_private_key(self._key):
            raise error.KeyTypeMismatchError("Signing needs a private key")
        data = b"".join(self._data)
        if self._key_alg in (RSA, RSA_PSS):
            return self._key.sign(data, self._padding(), self._hash)
        if self._key_alg == ECDSA:
            return self._key.sign(data, ec.ECDSA(self._hash))
        return self._key.sign(data, self._hash)

    def verify(self, signature):
        """Checks a signature over the accumulated data.

        Returns:
            True if the signature verifies, False otherwise.

        Raises:
            error.MissingKeyError: init() was not called.
        """
        if self._key is None:
            raise error.MissingKeyError("Signature.init() was not called")
        key = keys.public_key_of(self._key)
        data = b"".join(self._data)
        try:
            if self._key_alg in (RSA, RSA_PSS):
                key.verify(signature, data, self._padding(), self._hash)
            elif self._key_alg == ECDSA:
                key.verify(signature, data, ec.ECDSA(self._hash))
            else:
                key.verify(signature, data, self._hash)
        except InvalidSignature:
            return False
        return True


def mac_key_bytes(key):
    """Raw HMAC key bytes from the accepted key forms.

    Args:
        key: bytes; a hex string; {"hex": h}, {"b64": b}, {"b64u": b} or
            {"utf8": s}; any other string is used as UTF-8.

    Raises:
        error.KeyTypeMismatchError: an asymmetric key was given.
        error.EncodingError: the key cannot be decoded.
    """
    if keys.is_key_object(key):
        raise error.KeyTypeMismatchError("HMAC needs a symmetric key")
    if isinstance(key, bytes):
        return key
    if isinstance(key, dict):
        if "hex" in key:
            return encoding.hex_to_bytes(key["hex"])
        if "b64" in key:
            return encoding.b64_decode(key["b64"])
        if "b64u" in key:
            return encoding.b64url_decode(key["b64u"])
        if "utf8" in key:
            return key["utf8"].encode("utf-8")
        raise error.EncodingError("Unsupported HMAC key form: %s" %
                                  sorted(key))
    if isinstance(key, str):
        if encoding.is_hex(key):
            return encoding.hex_to_bytes(key)
        return key.encode("utf-8")
    raise error.EncodingError("Unsupported HMAC key type: %s" %
                              type(key).__name__)


class Mac(object):
    """An HMAC over accumulated data."""

    def __init__(self, alg, key):
        """Initialize an HMAC.

        Args:
            alg: "HmacSHA256", "HmacSHA384", "HmacSHA512", ...
            key: any form mac_key_bytes() accepts.

        Raises:
            error.UnsupportedAlgorithmError: unknown algorithm.
        """
        match = _MAC_ALG_RE.match(alg or "")
        if not match:
            raise error.UnsupportedAlgorithmError(
                "Unsupported MAC algorithm: %s" % alg)
        self._alg = alg
        self._hmac = hmac.HMAC(mac_key_bytes(key), _HASHES[match.group(1)]())

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._alg)

    def update(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._hmac.update(data)
        return self

    def finish(self):
        """The MAC of the data so far. More data may still be added."""
        return self._hmac.copy().finalize()

    def verify(self, mac):
        """Constant-time comparison against the expected MAC."""
        try:
            self._hmac.copy().verify(mac)
        except InvalidSignature:
            return False
        return True


def _curve_order(key):
    curve_name = keys.public_key_of(key).curve.name
    try:
        return _ECDSA_CURVES[curve_name].order
    except KeyError:
        raise error.UnsupportedAlgorithmError("Unsupported curve: %s" %
                                              curve_name)


def ecdsa_der_to_concat(signature, key):
    """Converts a DER ECDSA signature into fixed-length R||S.

    Raises:
        error.EncodingError: the signature is not a DER ECDSA signature.
    """
    order = _curve_order(key)
    try:
        r, s = ecdsa.util.sigdecode_der(signature, order)
    except ecdsa.der.UnexpectedDER as e:
        raise error.EncodingError("Invalid DER ECDSA signature: %s" % e)
    return ecdsa.util.sigencode_string(r, s, order)


def ecdsa_concat_to_der(signature, key):
    """Converts an R||S ECDSA signature into DER.

    Raises:
        error.EncodingError: the length does not match the curve.
    """
    order = _curve_order(key)
    try:
        r, s = ecdsa.util.sigdecode_string(signature, order)
    except ecdsa.util.MalformedSignature as e:
        raise error.EncodingError("Invalid R||S ECDSA signature: %s" % e)
    return ecdsa.util.sigencode_der(r, s, order)
