"""TBSCertificate and TBSCertList builders (RFC 5280)."""

from pyasn1.type import univ

from pkisign.crypto import error
from pkisign.crypto import keys
from pkisign.crypto.asn1 import oid
from pkisign.crypto.asn1 import tag
from pkisign.crypto.asn1 import types
from pkisign.crypto.asn1 import x509_extension
from pkisign.crypto.asn1 import x509_name
from pkisign.crypto.asn1 import x509_time

# Version ::= INTEGER { v1(0), v2(1), v3(2) }
V1, V2, V3 = range(3)


class AlgorithmIdentifier(object):
    """AlgorithmIdentifier ::= SEQUENCE { algorithm, parameters ANY OPTIONAL }

    The parameters default to an explicit NULL, except for DSA and ECDSA
    signature algorithms whose parameters RFC 3279/5758 require to be absent.
    """

    def __init__(self, name, params=None, param_empty=False):
        """Initialize an algorithm identifier.

        Args:
            name: algorithm name such as "SHA256withRSA", or a dotted OID.
            params: DER (bytes or hex) of the parameters, used verbatim.
            param_empty: omit the parameters.

        Raises:
            error.ASN1Error: unknown algorithm name.
        """
        self._oid = oid.name_to_oid(name)
        self._name = name
        if params is not None:
            params = types.octet_string_bytes(params)
        elif name.lower().endswith(("withdsa", "withecdsa")):
            param_empty = True
        self._params = params
        self._param_empty = param_empty

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._name)

    @property
    def name(self):
        """The algorithm name, e.g. "SHA256withRSA"."""
        return self._oid.short_name()

    def oid(self):
        return self._oid

    def to_asn1(self):
        components = [self._oid]
        if self._params is not None:
            components.append(types.raw(self._params))
        elif not self._param_empty:
            components.append(univ.Null(""))
        return types.sequence(components)

    def encode(self):
        return types.encode(self.to_asn1())


def _signature_algorithm(alg):
    if isinstance(alg, AlgorithmIdentifier):
        return alg
    if isinstance(alg, dict):
        alg = alg.get("name")
    if not isinstance(alg, str):
        raise error.ASN1Error("Invalid signature algorithm: %r" % (alg,))
    oid.signature_algorithm_oid(alg)
    return AlgorithmIdentifier(alg)


class SubjectPublicKeyInfo(object):
    """The SubjectPublicKeyInfo of a key, as its library serializes it."""

    def __init__(self, key):
        """Initialize from a key object, PEM/DER key data or a certificate.

        Only the public half of a private key is used.
        """
        self._der = keys.spki_der(keys.get_key(key))

    def to_asn1(self):
        return types.raw(self._der)

    def encode(self):
        return self._der


class _Builder(object):
    """Shared memoization: encode() caches DER until a setter runs."""

    def __init__(self):
        self._der = None
        self._generation = 0

    @property
    def generation(self):
        """Incremented by every modification."""
        return self._generation

    def _modified(self):
        self._generation += 1
        self._der = None

    def _require(self, **fields):
        for field_name, value in sorted(fields.items()):
            if value is None:
                raise error.ASN1Error("%s: %s must be set before encoding" %
                                      (self.__class__.__name__, field_name))

    def to_asn1(self):
        raise NotImplementedError

    def encode(self):
        """DER encoding, memoized until the next modification.

        Raises:
            error.ASN1Error: a mandatory field is missing.
        """
        if self._der is None:
            self._der = types.encode(self.to_asn1())
        return self._der

    def encoded_hex(self):
        return self.encode().hex()


class TBSCertificate(_Builder):
    """TBSCertificate ::= SEQUENCE {
        version         [0]  EXPLICIT Version DEFAULT v1,
        serialNumber         CertificateSerialNumber,
        signature            AlgorithmIdentifier,
        issuer               Name,
        validity             Validity,
        subject              Name,
        subjectPublicKeyInfo SubjectPublicKeyInfo,
        extensions      [3]  EXPLICIT Extensions OPTIONAL }

    Version v3 is written when there is at least one extension; otherwise
    the version is omitted (v1). Issuer and subject unique IDs are not
    supported.
    """

    def __init__(self):
        super(TBSCertificate, self).__init__()
        self._serial_number = None
        self._signature_algorithm = None
        self._issuer = None
        self._not_before = None
        self._not_after = None
        self._subject = None
        self._subject_public_key_info = None
        self._extensions = []

    def set_serial_number(self, serial_number):
        """Sets the serial: an int, a hex string, or {"int"}/{"hex"}."""
        self._serial_number = types.integer(serial_number)
        self._modified()

    def set_signature_algorithm(self, alg):
        """Sets the signature algorithm by name or AlgorithmIdentifier.

        Raises:
            error.UnsupportedAlgorithmError: not a signature algorithm.
        """
        self._signature_algorithm = _signature_algorithm(alg)
        self._modified()

    def signature_algorithm(self):
        """The AlgorithmIdentifier, or None when not yet set."""
        return self._signature_algorithm

    def set_issuer(self, issuer):
        """Sets the issuer from any form x509_name.name_from_param takes."""
        self._issuer = x509_name.name_from_param(issuer)
        self._modified()

    def set_not_before(self, value, time_type=None):
        self._not_before = x509_time.Time(value, time_type)
        self._modified()

    def set_not_after(self, value, time_type=None):
        self._not_after = x509_time.Time(value, time_type)
        self._modified()

    def set_subject(self, subject):
        self._subject = x509_name.name_from_param(subject)
        self._modified()

    def set_subject_public_key(self, key):
        """Sets the subject key: a key object, PEM or a certificate."""
        self._subject_public_key_info = SubjectPublicKeyInfo(key)
        self._modified()

    def append_extension(self, extension):
        self._extensions.append(extension)
        self._modified()

    def append_extension_by_name(self, extension_name, params=None):
        """Appends a registered extension, e.g. ("KeyUsage", {"bin": "1"})."""
        x509_extension.append_by_name_to_list(extension_name, params,
                                              self._extensions)
        self._modified()

    def extensions(self):
        return tuple(self._extensions)

    def to_asn1(self):
        self._require(serial_number=self._serial_number,
                      signature_algorithm=self._signature_algorithm,
                      issuer=self._issuer,
                      not_before=self._not_before,
                      not_after=self._not_after,
                      subject=self._subject,
                      subject_public_key_info=self._subject_public_key_info)
        components = []
        if self._extensions:
            components.append(tag.explicit(univ.Integer(V3), 0))
        components.extend([
            self._serial_number,
            self._signature_algorithm.to_asn1(),
            self._issuer.to_asn1(),
            types.sequence([self._not_before.to_asn1(),
                            self._not_after.to_asn1()]),
            self._subject.to_asn1(),
            self._subject_public_key_info.to_asn1(),
            ])
        if self._extensions:
            components.append(tag.explicit(
                x509_extension.extensions_to_asn1(self._extensions), 3))
        return types.sequence(components)


class CRLEntry(object):
    """SEQUENCE { userCertificate CertificateSerialNumber,
                  revocationDate Time }"""

    def __init__(self, serial_number, revocation_date, time_type=None):
        self.serial_number = types.integer(serial_number)
        self.revocation_date = x509_time.Time(revocation_date, time_type)

    def to_asn1(self):
        return types.sequence([self.serial_number,
                               self.revocation_date.to_asn1()])


class TBSCertList(_Builder):
    """TBSCertList ::= SEQUENCE {
        version                 Version OPTIONAL,
        signature               AlgorithmIdentifier,
        issuer                  Name,
        thisUpdate              Time,
        nextUpdate              Time OPTIONAL,
        revokedCertificates     SEQUENCE OF CRLEntry OPTIONAL }

    CRL and CRL entry extensions are not supported.
    """

    def __init__(self):
        super(TBSCertList, self).__init__()
        self._version = None
        self._signature_algorithm = None
        self._issuer = None
        self._this_update = None
        self._next_update = None
        self._revoked = []

    def set_version(self, version):
        """Sets the raw version number (V2 == 1)."""
        self._version = univ.Integer(version)
        self._modified()

    def set_signature_algorithm(self, alg):
        self._signature_algorithm = _signature_algorithm(alg)
        self._modified()

    def signature_algorithm(self):
        return self._signature_algorithm

    def set_issuer(self, issuer):
        self._issuer = x509_name.name_from_param(issuer)
        self._modified()

    def set_this_update(self, value, time_type=None):
        self._this_update = x509_time.Time(value, time_type)
        self._modified()

    def set_next_update(self, value, time_type=None):
        self._next_update = x509_time.Time(value, time_type)
        self._modified()

    def add_revoked_certificate(self, serial_number, revocation_date,
                                time_type=None):
        """Adds a CRL entry.

        Args:
            serial_number: an int, hex string or {"int"}/{"hex"}.
            revocation_date: a Zulu string, datetime or {"str": ...}.
            time_type: forces x509_time.UTC_TIME or GENERALIZED_TIME.
        """
        self._revoked.append(CRLEntry(serial_number, revocation_date,
                                      time_type))
        self._modified()

    def revoked_certificates(self):
        return tuple(self._revoked)

    def to_asn1(self):
        self._require(signature_algorithm=self._signature_algorithm,
                      issuer=self._issuer,
                      this_update=self._this_update)
        components = []
        if self._version is not None:
            components.append(self._version)
        components.extend([self._signature_algorithm.to_asn1(),
                           self._issuer.to_asn1(),
                           self._this_update.to_asn1()])
        if self._next_update is not None:
            components.append(self._next_update.to_asn1())
        if self._revoked:
            components.append(types.sequence_of(
                [entry.to_asn1() for entry in self._revoked]))
        return types.sequence(components)
