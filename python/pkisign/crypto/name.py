"""GeneralName encoding (RFC 5280, section 4.2.1.6).

A GeneralName is built from exactly one variant keyword, e.g.
GeneralName(dns="example.com") or GeneralName(ip="10.0.0.1").
"""

import re
import socket

from pyasn1.type import char, univ

from pkisign.crypto import error
from pkisign.crypto.asn1 import tag
from pkisign.crypto.asn1 import types
from pkisign.crypto.asn1 import x509_name

RFC822_NAME = "rfc822"
DNS_NAME = "dns"
URI_NAME = "uri"
DIRECTORY_NAME = "dn"
IP_ADDRESS_NAME = "ip"

# Parameter keys, mapped to the variant they produce.
_VARIANT_KEYS = {
    "rfc822": RFC822_NAME,
    "dns": DNS_NAME,
    "uri": URI_NAME,
    "dn": DIRECTORY_NAME,
    "ldapdn": DIRECTORY_NAME,
    "certissuer": DIRECTORY_NAME,
    "certsubj": DIRECTORY_NAME,
    "ip": IP_ADDRESS_NAME,
    }

# RFC 5280 4.2.1.6 GeneralName context tags.
_TAG_NUMBERS = {
    RFC822_NAME: 1,
    DNS_NAME: 2,
    DIRECTORY_NAME: 4,
    URI_NAME: 6,
    IP_ADDRESS_NAME: 7,
    }

_IPV4_RE = re.compile(r"^[0-9.]+[.][0-9.]+$")
_IPV6_RE = re.compile(r"^[0-9A-Fa-f:]+:[0-9A-Fa-f:]+$")
_HEX_RE = re.compile(r"^([0-9A-Fa-f][0-9A-Fa-f])+$")


def ip_address_to_bytes(address):
    """Packs "192.168.0.1", "2001:db8::1" or hex "c0a80001" into bytes.

    Raises:
        error.EncodingError: the address matches none of the forms, or an
            IPv4 octet is out of range.
    """
    if _IPV4_RE.match(address):
        family = socket.AF_INET
    elif _IPV6_RE.match(address):
        family = socket.AF_INET6
    elif _HEX_RE.match(address):
        return bytes.fromhex(address)
    else:
        raise error.EncodingError("Malformed IP address: %s" % address)
    try:
        return socket.inet_pton(family, address)
    except (OSError, ValueError):
        raise error.EncodingError("Malformed IP address: %s" % address)


class GeneralName(object):
    """An X509 GeneralName, built from exactly one variant parameter.

    Examples:
        GeneralName(dns="example.com")
        GeneralName(uri="http://example.com/ca.crl")
        GeneralName(dn="/C=US/O=Example")
        GeneralName(ldapdn="O=Example,C=US")
        GeneralName(certissuer=pem_certificate)
        GeneralName(ip="192.168.0.1")
    """

    def __init__(self, **params):
        if len(params) != 1:
            raise error.UnsupportedGeneralNameError(
                "GeneralName needs exactly one variant, got %s" %
                (sorted(params) or "none"))
        (key, value), = params.items()
        try:
            self._type = _VARIANT_KEYS[key]
        except KeyError:
            raise error.UnsupportedGeneralNameError(
                "Unsupported GeneralName variant: %s" % key)
        self._key = key
        self._value = value
        # Built eagerly so that malformed values are rejected right away.
        self._asn1 = self._build()

    def _build(self):
        number = _TAG_NUMBERS[self._type]
        if self._type in (RFC822_NAME, DNS_NAME, URI_NAME):
            return tag.implicit(char.IA5String(self._value), number)
        if self._type == IP_ADDRESS_NAME:
            return tag.implicit(
                univ.OctetString(ip_address_to_bytes(self._value)), number)
        if self._key == "ldapdn":
            name = x509_name.X500Name.from_ldap_string(self._value)
        elif self._key == "certissuer":
            name = x509_name.X500Name.from_certificate_issuer(self._value)
        elif self._key == "certsubj":
            name = x509_name.X500Name.from_certificate_subject(self._value)
        else:
            name = x509_name.name_from_param(self._value)
        # Name is a CHOICE, so its tag is always explicit.
        return tag.explicit(name.to_asn1(), number)

    def __repr__(self):
        return "%s(%s=%r)" % (self.__class__.__name__, self._key, self._value)

    def type(self):
        """Indicates the type of the GeneralName.
        Returns:
            one of RFC822_NAME, DNS_NAME, URI_NAME, DIRECTORY_NAME or
            IP_ADDRESS_NAME.
        """
        return self._type

    def value(self):
        """Returns the parameter this GeneralName was built from."""
        return self._value

    def to_asn1(self):
        return self._asn1

    def encode(self):
        return types.encode(self._asn1)


class GeneralNames(object):
    """SEQUENCE OF GeneralName, optionally with an implicit context tag."""

    def __init__(self, names, tag_number=None):
        """Initialize from GeneralName objects or parameter dicts.

        Args:
            names: e.g. [{"dns": "example.com"}, {"ip": "10.0.0.1"}].
            tag_number: context tag replacing the SEQUENCE tag, for fields
                such as AuthorityKeyIdentifier.authorityCertIssuer.
        """
        self._names = [n if isinstance(n, GeneralName) else GeneralName(**n)
                       for n in names]
        self._tag_number = tag_number

    def names(self):
        return list(self._names)

    def to_asn1(self):
        tag_set = None
        if self._tag_number is not None:
            tag_set = tag.implicit_tag_set(univ.SequenceOf, self._tag_number)
        return types.sequence_of([n.to_asn1() for n in self._names],
                                 tag_set=tag_set)

    def encode(self):
        return types.encode(self.to_asn1())
