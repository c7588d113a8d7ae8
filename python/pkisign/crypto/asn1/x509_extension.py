"""X509v3 certificate extensions from RFC 5280.

Extensions are looked up by name in a registry, so a certificate can be
described as data:

    extensions = []
    append_by_name_to_list("BasicConstraints", {"ca": True}, extensions)
    append_by_name_to_list("KeyUsage", {"names": ["keyCertSign"]}, extensions)

Each extension encodes to the common envelope

    Extension ::= SEQUENCE {
        extnID      OBJECT IDENTIFIER,
        critical    BOOLEAN DEFAULT FALSE,
        extnValue   OCTET STRING }

where extnValue holds the DER of the extension-specific value.
"""

import abc

from pyasn1.type import univ

from pkisign.crypto import error
from pkisign.crypto import keys
from pkisign.crypto import name
from pkisign.crypto.asn1 import oid
from pkisign.crypto.asn1 import tag
from pkisign.crypto.asn1 import types

# Lower-cased extension name -> extension class.
_EXTENSION_DICT = {}


def register(extension_name):
    """Class decorator adding an Extension subclass to the registry."""
    def decorator(cls):
        cls.NAME = extension_name
        _EXTENSION_DICT[extension_name.lower()] = cls
        return cls
    return decorator


def registered_names():
    return sorted(cls.NAME for cls in _EXTENSION_DICT.values())


def extension_from_name(extension_name, **params):
    """Instantiates a registered extension.

    Args:
        extension_name: e.g. "basicConstraints" (case-insensitive).
        params: keyword arguments of the extension class, including
            "critical".

    Raises:
        error.UnsupportedExtensionError: no extension has that name.
        error.ASN1Error: the parameters are not valid for the extension.
    """
    try:
        cls = _EXTENSION_DICT[extension_name.lower()]
    except KeyError:
        raise error.UnsupportedExtensionError(
            "Unsupported extension: %s" % extension_name)
    try:
        return cls(**params)
    except TypeError as e:
        raise error.ASN1Error("Invalid parameters for %s: %s" %
                              (cls.NAME, e))


def append_by_name_to_list(extension_name, params, extension_list):
    """Builds an extension by name and appends it to extension_list."""
    extension_list.append(extension_from_name(extension_name,
                                              **(params or {})))
    return extension_list


def extensions_to_asn1(extension_list):
    """The Extensions SEQUENCE OF, in list order."""
    return types.sequence_of([e.to_asn1() for e in extension_list])


class Extension(object, metaclass=abc.ABCMeta):
    """Base class of all extensions."""
    OID = None
    NAME = None

    def __init__(self, critical=False):
        self.critical = bool(critical)

    def __repr__(self):
        return "%s(critical=%r)" % (self.__class__.__name__, self.critical)

    def oid(self):
        return self.OID

    @abc.abstractmethod
    def value_asn1(self):
        """The ASN.1 value placed inside extnValue."""
        pass

    def encode_value(self):
        return types.encode(self.value_asn1())

    def to_asn1(self):
        components = [self.OID]
        if self.critical:
            components.append(univ.Boolean(True))
        components.append(univ.OctetString(self.encode_value()))
        return types.sequence(components)

    def encode(self):
        return types.encode(self.to_asn1())


def _key_identifier(kid):
    """KeyIdentifier bytes from bytes, hex, {"hex": h} or a key object."""
    if keys.is_key_object(kid):
        return keys.key_identifier(kid)
    return types.octet_string_bytes(kid)


@register("BasicConstraints")
class BasicConstraints(Extension):
    OID = oid.ID_CE_BASIC_CONSTRAINTS

    def __init__(self, ca=False, path_len=-1, critical=False):
        super(BasicConstraints, self).__init__(critical)
        self.ca = bool(ca)
        self.path_len = path_len

    def value_asn1(self):
        components = []
        # cA is DEFAULT FALSE, so DER omits a false value.
        if self.ca:
            components.append(univ.Boolean(True))
        if self.path_len is not None and self.path_len >= 0:
            components.append(univ.Integer(self.path_len))
        return types.sequence(components)


@register("KeyUsage")
class KeyUsage(Extension):
    OID = oid.ID_CE_KEY_USAGE

    NAMED_BITS = ("digitalSignature", "nonRepudiation", "keyEncipherment",
                  "dataEncipherment", "keyAgreement", "keyCertSign",
                  "cRLSign", "encipherOnly", "decipherOnly")

    def __init__(self, bin=None, names=None, critical=False):
        """Initialize from a binary string or from named bits.

        Args:
            bin: e.g. "101", bit 0 first.
            names: e.g. ["digitalSignature", "keyAgreement"].
            critical: criticality flag.

        Raises:
            error.ASN1Error: neither or both given, or an unknown name.
        """
        super(KeyUsage, self).__init__(critical)
        if (bin is None) == (names is None):
            raise error.ASN1Error("KeyUsage needs exactly one of bin, names")
        if names is not None:
            bits = ["0"] * len(self.NAMED_BITS)
            for bit_name in names:
                try:
                    bits[self.NAMED_BITS.index(bit_name)] = "1"
                except ValueError:
                    raise error.ASN1Error("Unknown key usage: %s" % bit_name)
            bin = "".join(bits)
        # Validates the characters.
        types.bit_string_from_bin(bin)
        # DER: a named bit list carries no trailing zero bits.
        self.bits = bin.rstrip("0")

    def value_asn1(self):
        return types.bit_string_from_bin(self.bits)


@register("ExtKeyUsage")
class ExtKeyUsage(Extension):
    OID = oid.ID_CE_EXT_KEY_USAGE

    def __init__(self, purposes=(), critical=False):
        """Initialize from key purposes.

        Args:
            purposes: names ("serverAuth"), dotted OIDs, or dicts
                {"oid": "1.3.6.1.5.5.7.3.1"} / {"name": "clientAuth"}.
            critical: criticality flag.
        """
        super(ExtKeyUsage, self).__init__(critical)
        self.purposes = []
        for purpose in purposes:
            if isinstance(purpose, dict):
                purpose = purpose.get("oid", purpose.get("name"))
            if purpose is None:
                raise error.ASN1Error("Key purpose needs an oid or a name")
            self.purposes.append(oid.name_to_oid(purpose))

    def value_asn1(self):
        return types.sequence_of(self.purposes)


class DistributionPoint(object):
    """A DistributionPoint carrying only a fullName."""

    def __init__(self, full_name):
        """Initialize a distribution point.

        Args:
            full_name: a GeneralNames, or a list of GeneralName parameter
                dicts.
        """
        if not isinstance(full_name, name.GeneralNames):
            full_name = name.GeneralNames(full_name)
        self.full_name = full_name

    @classmethod
    def from_uri(cls, uri):
        return cls([{"uri": uri}])

    def to_asn1(self):
        # fullName [0] IMPLICIT GeneralNames inside the CHOICE
        # DistributionPointName, which is itself tagged [0] (explicitly,
        # being a CHOICE).
        full_name = name.GeneralNames(self.full_name.names(), tag_number=0)
        return types.sequence([tag.explicit(full_name.to_asn1(), 0)])


@register("CRLDistributionPoints")
class CRLDistributionPoints(Extension):
    OID = oid.ID_CE_CRL_DISTRIBUTION_POINTS

    def __init__(self, uri=None, points=None, critical=False):
        """Initialize from a single URI or a list of distribution points.

        Args:
            uri: shortcut for one point with that URI as its fullName.
            points: DistributionPoint objects, URIs, or lists of
                GeneralName parameter dicts.
            critical: criticality flag.
        """
        super(CRLDistributionPoints, self).__init__(critical)
        if uri is not None:
            points = [uri]
        if not points:
            raise error.ASN1Error("CRLDistributionPoints needs uri or points")
        self.points = []
        for point in points:
            if isinstance(point, str):
                point = DistributionPoint.from_uri(point)
            elif not isinstance(point, DistributionPoint):
                point = DistributionPoint(point)
            self.points.append(point)

    def value_asn1(self):
        return types.sequence_of([p.to_asn1() for p in self.points])


@register("AuthorityKeyIdentifier")
class AuthorityKeyIdentifier(Extension):
    OID = oid.ID_CE_AUTHORITY_KEY_IDENTIFIER

    def __init__(self, kid=None, issuer=None, sn=None, critical=False):
        """Initialize from any subset of the three optional fields.

        Args:
            kid: keyIdentifier as bytes, hex, {"hex": h}, or the issuer's
                key object (hashed per RFC 5280 method 1).
            issuer: the issuer's issuer name, in any form accepted for a
                directoryName GeneralName.
            sn: the issuer certificate's serial number.
            critical: criticality flag.
        """
        super(AuthorityKeyIdentifier, self).__init__(critical)
        self.kid = _key_identifier(kid) if kid is not None else None
        self.issuer = (name.GeneralNames([{"dn": issuer}], tag_number=1)
                       if issuer is not None else None)
        self.sn = types.integer(sn) if sn is not None else None

    def value_asn1(self):
        components = []
        if self.kid is not None:
            components.append(tag.implicit(univ.OctetString(self.kid), 0))
        if self.issuer is not None:
            components.append(self.issuer.to_asn1())
        if self.sn is not None:
            components.append(tag.implicit(self.sn, 2))
        return types.sequence(components)


@register("SubjectKeyIdentifier")
class SubjectKeyIdentifier(Extension):
    OID = oid.ID_CE_SUBJECT_KEY_IDENTIFIER

    def __init__(self, kid, critical=False):
        super(SubjectKeyIdentifier, self).__init__(critical)
        self.kid = _key_identifier(kid)

    def value_asn1(self):
        return univ.OctetString(self.kid)


_ACCESS_METHODS = {
    "ocsp": oid.ID_AD_OCSP,
    "caissuers": oid.ID_AD_CA_ISSUERS,
    }


@register("AuthorityInfoAccess")
class AuthorityInfoAccess(Extension):
    OID = oid.ID_PE_AUTHORITY_INFO_ACCESS

    def __init__(self, access_descriptions=(), critical=False):
        """Initialize from access descriptions.

        Args:
            access_descriptions: dicts such as
                {"access_method": "ocsp",
                 "access_location": {"uri": "http://ocsp.example.com"}}.
                access_method may also be a dotted OID or {"oid": ...}.
            critical: criticality flag.
        """
        super(AuthorityInfoAccess, self).__init__(critical)
        self.access_descriptions = []
        for description in access_descriptions:
            try:
                method = description["access_method"]
                location = description["access_location"]
            except KeyError as e:
                raise error.ASN1Error("Access description lacks %s" % e)
            if isinstance(method, dict):
                method = method.get("oid", method.get("name"))
            if isinstance(method, str) and method.lower() in _ACCESS_METHODS:
                method = _ACCESS_METHODS[method.lower()]
            else:
                method = oid.name_to_oid(method)
            if not isinstance(location, name.GeneralName):
                location = name.GeneralName(**location)
            self.access_descriptions.append((method, location))

    def value_asn1(self):
        return types.sequence_of([
            types.sequence([method, location.to_asn1()])
            for method, location in self.access_descriptions])


class _AltName(Extension):

    def __init__(self, names=(), critical=False):
        super(_AltName, self).__init__(critical)
        self.names = name.GeneralNames(names)

    def value_asn1(self):
        return self.names.to_asn1()


@register("SubjectAltName")
class SubjectAltName(_AltName):
    OID = oid.ID_CE_SUBJECT_ALT_NAME


@register("IssuerAltName")
class IssuerAltName(_AltName):
    OID = oid.ID_CE_ISSUER_ALT_NAME
