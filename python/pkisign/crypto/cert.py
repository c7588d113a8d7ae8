"""Signed X.509 structures: certificates and CRLs.

    Certificate ::= SEQUENCE {
        tbsCertificate       TBSCertificate,
        signatureAlgorithm   AlgorithmIdentifier,
        signatureValue       BIT STRING }

CertificateList has the same shape around a TBSCertList.
"""

import collections
import logging

from pyasn1.type import univ

from pkisign.crypto import encoding
from pkisign.crypto import error
from pkisign.crypto import pem
from pkisign.crypto.asn1 import types
from pkisign.crypto.asn1 import x509
from pkisign.crypto.signing import signer

# What a signed structure encodes: frozen at signing time.
_Snapshot = collections.namedtuple(
    "_Snapshot", ["generation", "tbs_der", "algorithm", "signature"])


class _Signed(object):
    PEM_MARKER = None

    def __init__(self, tbs):
        self._tbs = tbs
        self._snapshot = None
        self._der = None

    def __repr__(self):
        return "%s(signed=%r)" % (self.__class__.__name__, self.is_signed())

    def tbs(self):
        return self._tbs

    def _algorithm(self):
        algorithm = self._tbs.signature_algorithm()
        if algorithm is None:
            raise error.ASN1Error("%s: signature algorithm is not set" %
                                  self.__class__.__name__)
        return algorithm

    def _record(self, algorithm, signature):
        self._snapshot = _Snapshot(self._tbs.generation, self._tbs.encode(),
                                   algorithm, signature)
        self._der = None

    def sign(self, private_key, passphrase=None):
        """Signs the TBS structure with its declared signature algorithm.

        Args:
            private_key: a private key object or PEM/DER private key.
            passphrase: password of an encrypted private key.

        Raises:
            error.ASN1Error: the TBS structure is incomplete.
            error.UnsupportedAlgorithmError: the algorithm cannot sign.
            error.KeyTypeMismatchError: the key does not fit the algorithm.
        """
        algorithm = self._algorithm()
        sig = signer.Signature(algorithm.name)
        sig.init(private_key, passphrase)
        sig.update(self._tbs.encode())
        self._record(algorithm, sig.sign())
        logging.debug("Signed %s with %s", self.__class__.__name__,
                      algorithm.name)

    def set_signature_hex(self, signature_hex):
        """Attaches a signature computed elsewhere over tbs().encode()."""
        self._record(self._algorithm(), encoding.hex_to_bytes(signature_hex))

    def is_signed(self):
        """True if signed and the TBS structure is unchanged since."""
        return (self._snapshot is not None and
                self._snapshot.generation == self._tbs.generation)

    def signature(self):
        if not self.is_signed():
            raise error.NotSignedError("%s is not signed" %
                                       self.__class__.__name__)
        return self._snapshot.signature

    def encode(self):
        """DER encoding of the signed structure.

        Raises:
            error.NotSignedError: not signed, or modified after signing.
        """
        if self._snapshot is None:
            raise error.NotSignedError("%s is not signed" %
                                       self.__class__.__name__)
        if not self.is_signed():
            raise error.NotSignedError(
                "%s was modified after signing; sign it again" %
                self._tbs.__class__.__name__)
        if self._der is None:
            snapshot = self._snapshot
            self._der = types.encode(types.sequence([
                types.raw(snapshot.tbs_der),
                snapshot.algorithm.to_asn1(),
                univ.BitString(hexValue=snapshot.signature.hex()),
                ]))
        return self._der

    def encoded_hex(self):
        return encoding.bytes_to_hex(self.encode())

    def to_pem(self):
        return pem.to_pem(self.encode(), self.PEM_MARKER)


class Certificate(_Signed):
    """An X.509 certificate around a TBSCertificate."""
    PEM_MARKER = "CERTIFICATE"


class CRL(_Signed):
    """An X.509 CRL around a TBSCertList."""
    PEM_MARKER = "X509 CRL"


def _required(params, key):
    try:
        return params[key]
    except KeyError:
        raise error.ASN1Error("Certificate parameter missing: %s" % key)


def new_cert_pem(params):
    """Issues a certificate in one call.

    Args:
        params: a dict such as
            {"serial": {"int": 4},
             "sigalg": {"name": "SHA256withRSA"},
             "issuer": {"str": "/C=US/O=a"},
             "notbefore": {"str": "130504235959Z"},
             "notafter": {"str": "140504235959Z"},
             "subject": {"str": "/C=US/O=b"},
             "sbjpubkey": public_key_pem,
             "ext": [{"BasicConstraints": {"ca": True}},
                     {"KeyUsage": {"bin": "11"}}],
             "cakey": private_key_pem}
            "cakey_passphrase" unlocks an encrypted "cakey"; "sighex" may
            replace "cakey" with a precomputed signature.

    Returns:
        the certificate in PEM.

    Raises:
        error.ASN1Error: a mandatory parameter is missing or malformed.
    """
    tbs = x509.TBSCertificate()
    tbs.set_serial_number(_required(params, "serial"))
    tbs.set_signature_algorithm(_required(params, "sigalg"))
    tbs.set_issuer(_required(params, "issuer"))
    tbs.set_not_before(_required(params, "notbefore"))
    tbs.set_not_after(_required(params, "notafter"))
    tbs.set_subject(_required(params, "subject"))
    tbs.set_subject_public_key(_required(params, "sbjpubkey"))
    for extension in params.get("ext") or ():
        if not isinstance(extension, dict) or len(extension) != 1:
            raise error.ASN1Error("Each extension must be a single "
                                  "{name: params} mapping: %r" % (extension,))
        (extension_name, extension_params), = extension.items()
        tbs.append_extension_by_name(extension_name, extension_params)

    certificate = Certificate(tbs)
    if "cakey" in params:
        certificate.sign(params["cakey"], params.get("cakey_passphrase"))
    elif "sighex" in params:
        certificate.set_signature_hex(params["sighex"])
    else:
        raise error.ASN1Error("Certificate parameter missing: cakey or "
                              "sighex")
    return certificate.to_pem()
