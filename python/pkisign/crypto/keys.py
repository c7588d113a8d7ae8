"""Loading key and certificate objects.

Keys are cryptography key objects throughout the package; this module turns
the forms callers hand us (PEM text, DER bytes, certificates) into them and
answers the type questions the signing code asks.
"""

import binascii

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import rsa

from pkisign.crypto import error
from pkisign.crypto import pem

_PRIVATE_KEY_TYPES = (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey,
                      dsa.DSAPrivateKey)
_PUBLIC_KEY_TYPES = (rsa.RSAPublicKey, ec.EllipticCurvePublicKey,
                     dsa.DSAPublicKey)

CERTIFICATE_PEM_MARKERS = ("CERTIFICATE",)


def is_key_object(key):
    return isinstance(key, _PRIVATE_KEY_TYPES + _PUBLIC_KEY_TYPES)


def is_private_key(key):
    return isinstance(key, _PRIVATE_KEY_TYPES)


def is_rsa_key(key):
    return isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey))


def is_ec_key(key):
    return isinstance(key, (ec.EllipticCurvePrivateKey,
                            ec.EllipticCurvePublicKey))


def is_dsa_key(key):
    return isinstance(key, (dsa.DSAPrivateKey, dsa.DSAPublicKey))


def public_key_of(key):
    """The public half of a key object (a public key is returned as is)."""
    if is_private_key(key):
        return key.public_key()
    return key


def _password(passphrase):
    if passphrase is None or isinstance(passphrase, bytes):
        return passphrase
    return passphrase.encode("utf-8")


def get_key(key, passphrase=None):
    """Loads a key object.

    Args:
        key: a cryptography key object, a cryptography Certificate (its
            public key is used), or PEM/DER data holding a private key, a
            public key or a certificate.
        passphrase: password for an encrypted private key.

    Returns:
        a cryptography private or public key object.

    Raises:
        error.EncodingError: the data cannot be parsed as a key.
        error.UnsupportedAlgorithmError: the key type is not supported.
    """
    if is_key_object(key):
        return key
    if isinstance(key, x509.Certificate):
        return key.public_key()
    if isinstance(key, str):
        key = key.encode("utf-8")
    if not isinstance(key, bytes):
        raise error.EncodingError("Cannot load a key from %r" % type(key))

    try:
        if b"-----BEGIN" in key:
            return _load_pem(key, passphrase)
        return _load_der(key, passphrase)
    except UnsupportedAlgorithm as e:
        raise error.UnsupportedAlgorithmError(e)


def _load_pem(data, passphrase):
    try:
        if b"PRIVATE KEY-----" in data:
            return serialization.load_pem_private_key(
                data, password=_password(passphrase))
        if b"PUBLIC KEY-----" in data:
            return serialization.load_pem_public_key(data)
        if b"CERTIFICATE-----" in data:
            return x509.load_pem_x509_certificate(data).public_key()
    except (ValueError, TypeError) as e:
        raise pem.PemError("Invalid PEM key: %s" % e)
    raise pem.PemError("No key or certificate PEM block found")


def _load_der(data, passphrase):
    try:
        return serialization.load_der_private_key(
            data, password=_password(passphrase))
    except (ValueError, TypeError):
        pass
    try:
        return serialization.load_der_public_key(data)
    except ValueError:
        pass
    try:
        return x509.load_der_x509_certificate(data).public_key()
    except ValueError:
        raise error.EncodingError("Cannot parse DER data as a key")


def load_certificate(cert):
    """Loads a certificate object.

    Args:
        cert: a cryptography Certificate, PEM text, hex-encoded DER or DER
            bytes.

    Returns:
        a cryptography.x509.Certificate.

    Raises:
        error.EncodingError: the data is not a certificate.
    """
    if isinstance(cert, x509.Certificate):
        return cert
    if isinstance(cert, str):
        if "-----BEGIN" in cert:
            der, _ = pem.from_pem(cert, CERTIFICATE_PEM_MARKERS)
        else:
            try:
                der = binascii.unhexlify(cert)
            except (binascii.Error, ValueError):
                raise error.EncodingError("Certificate is neither PEM nor hex")
    elif isinstance(cert, bytes):
        der = cert
        if b"-----BEGIN" in cert:
            der, _ = pem.from_pem(cert, CERTIFICATE_PEM_MARKERS)
    else:
        raise error.EncodingError("Cannot load a certificate from %r" %
                                  type(cert))
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as e:
        raise error.EncodingError("Invalid certificate: %s" % e)


def spki_der(key):
    """DER SubjectPublicKeyInfo of a key object or its public half."""
    return public_key_of(key).public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo)


def key_identifier(key):
    """RFC 5280 method (1) key identifier: SHA-1 of the subjectPublicKey."""
    return x509.SubjectKeyIdentifier.from_public_key(
        public_key_of(key)).digest
