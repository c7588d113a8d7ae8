"""X.500 distinguished names and their string forms.

Two string syntaxes are supported:

  oneline (OpenSSL):  /C=US/O=Example/CN=www.example.com
  LDAP (RFC 2253):    CN=www.example.com,O=Example,C=US

The oneline form lists RDNs most significant first and the LDAP form lists
them in reverse. Within an RDN, several type=value pairs may be joined with
"+" (a multi-valued RDN). A "+" that belongs to a value is written as "\\+"
or the value is double-quoted (CN="a+b"); a "/" inside a oneline value is
written as "\\/" and a "," inside an LDAP value as "\\,".
"""

import re

from pkisign.crypto import error
from pkisign.crypto import keys
from pkisign.crypto.asn1 import oid
from pkisign.crypto.asn1 import types

# type=value, e.g., CN=google.com
_TYPE_AND_VALUE_RE = re.compile(r"^([^=]+)=(.+)$", re.DOTALL)
_OPEN_QUOTE_RE = re.compile(r'^[^=]+="')
_QUOTED_VALUE_RE = re.compile(r'^([^=]+)="(.*)"$', re.DOTALL)
_UNESCAPED_SLASH_RE = re.compile(r"(?<!\\)/")

# RFC 5280 mandates PrintableString for these and IA5String for e-mail and
# domain components; everything else is UTF8String.
_DEFAULT_STRING_TYPES = {
    oid.ID_AT_COUNTRY_NAME: types.PRINTABLE,
    oid.ID_AT_SERIAL_NUMBER: types.PRINTABLE,
    oid.ID_AT_DN_QUALIFIER: types.PRINTABLE,
    oid.ID_EMAIL_ADDRESS: types.IA5,
    oid.ID_DOMAIN_COMPONENT: types.IA5,
    }


def _rejoin_escaped(items, separator):
    """Rejoins items split on a separator that was escaped with a backslash.

    The backslash is dropped, so ["a\\", "b"] with "+" becomes ["a+b"].
    """
    joined = []
    for item in items:
        if joined and joined[-1].endswith("\\"):
            joined[-1] = joined[-1][:-1] + separator + item
        else:
            joined.append(item)
    return joined


def parse_multi_valued(rdn_string):
    """Splits a multi-valued RDN into its type=value strings.

    Args:
        rdn_string: e.g. 'CN=a+O=b', 'CN=a\\+b' or 'CN="a+b"+O=c'.

    Returns:
        a list of type=value strings in input order, with escapes and
        quotes removed.

    Raises:
        error.EncodingError: a quoted value is never closed.
    """
    items = _rejoin_escaped(rdn_string.split("+"), "+")

    result = []
    quoted = None
    for item in items:
        if quoted is not None:
            quoted += "+" + item
            if item.endswith('"'):
                result.append(quoted)
                quoted = None
        elif _OPEN_QUOTE_RE.match(item) and not _QUOTED_VALUE_RE.match(item):
            quoted = item
        else:
            result.append(item)
    if quoted is not None:
        raise error.EncodingError("Unterminated quote in RDN: %s" % rdn_string)

    unquoted = []
    for item in result:
        match = _QUOTED_VALUE_RE.match(item)
        if match:
            item = "%s=%s" % match.groups()
        unquoted.append(item)
    return unquoted


def _split_oneline(dn_string):
    """Splits a oneline DN into RDN strings, escapes left in place."""
    if not dn_string.startswith("/"):
        raise error.EncodingError("Malformed oneline DN (must start with "
                                  "'/'): %s" % dn_string)
    segments = []
    for token in _UNESCAPED_SLASH_RE.split(dn_string[1:]):
        # A token without "=" is a continuation of the previous value,
        # e.g. CN=1980/12/31.
        if segments and not _TYPE_AND_VALUE_RE.match(token):
            segments[-1] += "/" + token
        else:
            segments.append(token)
    return segments


def parse_oneline(dn_string):
    """Parses an OpenSSL oneline DN.

    Args:
        dn_string: e.g. "/C=US/O=Example/CN=www.example.com".

    Returns:
        a list of RDNs, most significant first, each a list of type=value
        strings.

    Raises:
        error.EncodingError: the string does not start with "/", or has
            unterminated quotes.
    """
    return [[item.replace("\\/", "/") for item in parse_multi_valued(rdn)]
            for rdn in _split_oneline(dn_string)]


def oneline_to_ldap(dn_string):
    """Converts "/C=US/O=a,b" into "O=a\\,b,C=US".

    Raises:
        error.EncodingError: the string does not start with "/".
    """
    rdns = _split_oneline(dn_string)
    return ",".join(rdn.replace("\\/", "/").replace(",", "\\,")
                    for rdn in reversed(rdns))


def ldap_to_oneline(dn_string):
    """Converts "O=a\\,b,C=US" into "/C=US/O=a,b"."""
    rdns = _rejoin_escaped(dn_string.split(","), ",")
    return "/" + "/".join(rdn.replace("/", "\\/") for rdn in reversed(rdns))


class AttributeTypeAndValue(object):
    """A single type=value pair of an RDN."""

    def __init__(self, attribute_type, value, string_type=None):
        """Initialize an attribute.

        Args:
            attribute_type: a short name such as "CN", or a dotted OID.
            value: the attribute value.
            string_type: one of types.UTF8, PRINTABLE, TELETEX or IA5.
                Defaults to the type RFC 5280 expects for the attribute.

        Raises:
            error.UnknownASN1AttributeTypeError: unknown attribute type.
        """
        self._oid = oid.attribute_short_name_to_oid(attribute_type)
        self._type = attribute_type
        self._value = value
        if string_type is None:
            string_type = _DEFAULT_STRING_TYPES.get(self._oid, types.UTF8)
        self._string_type = string_type

    @classmethod
    def from_string(cls, type_and_value):
        match = _TYPE_AND_VALUE_RE.match(type_and_value)
        if not match:
            raise error.EncodingError("Malformed attribute type and value: "
                                      "%s" % type_and_value)
        return cls(match.group(1), match.group(2))

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self._type,
                               self._value)

    def __str__(self):
        return "%s=%s" % (self._type, self._value)

    def oid(self):
        return self._oid

    def value(self):
        return self._value

    def to_asn1(self):
        return types.sequence([
            self._oid, types.directory_string(self._value, self._string_type)])


class RelativeDistinguishedName(object):
    """A SET OF AttributeTypeAndValue."""

    def __init__(self, attributes):
        if not attributes:
            raise error.EncodingError("An RDN needs at least one attribute")
        self._attributes = list(attributes)

    @classmethod
    def from_string(cls, rdn_string):
        """Parses "CN=a" or the multi-valued "CN=a+O=b"."""
        return cls([AttributeTypeAndValue.from_string(item)
                    for item in parse_multi_valued(rdn_string)])

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._attributes)

    def __str__(self):
        return "+".join(str(a).replace("+", "\\+") for a in self._attributes)

    def attributes(self):
        return list(self._attributes)

    def to_asn1(self):
        return types.set_of([a.to_asn1() for a in self._attributes])


class X500Name(object):
    """An X.500 distinguished name (an RDNSequence)."""

    def __init__(self, rdns=(), der=None):
        """Initialize a name.

        Args:
            rdns: RelativeDistinguishedName objects, most significant
                first.
            der: alternatively, the DER encoding of a Name, copied into the
                output verbatim.
        """
        self._rdns = list(rdns)
        self._der = der

    @classmethod
    def from_string(cls, dn_string):
        rdns = []
        for items in parse_oneline(dn_string):
            rdns.append(RelativeDistinguishedName(
                [AttributeTypeAndValue.from_string(item) for item in items]))
        return cls(rdns)

    @classmethod
    def from_ldap_string(cls, dn_string):
        return cls.from_string(ldap_to_oneline(dn_string))

    @classmethod
    def from_dict(cls, attributes):
        """One single-valued RDN per key, in iteration order.

        Args:
            attributes: e.g. {"C": "US", "O": "Example"}.
        """
        return cls([RelativeDistinguishedName([AttributeTypeAndValue(k, v)])
                    for k, v in attributes.items()])

    @classmethod
    def from_certificate_issuer(cls, cert):
        """The issuer of a PEM, hex or DER certificate, byte for byte."""
        return cls(der=keys.load_certificate(cert).issuer.public_bytes())

    @classmethod
    def from_certificate_subject(cls, cert):
        """The subject of a PEM, hex or DER certificate, byte for byte."""
        return cls(der=keys.load_certificate(cert).subject.public_bytes())

    def __repr__(self):
        if self._der is not None:
            return "%s(der=%r)" % (self.__class__.__name__, self._der)
        return "%s(%r)" % (self.__class__.__name__, self._rdns)

    def __str__(self):
        return "".join("/" + str(rdn).replace("/", "\\/")
                       for rdn in self._rdns)

    def rdns(self):
        return list(self._rdns)

    def to_asn1(self):
        if self._der is not None:
            return types.raw(self._der)
        return types.sequence_of([rdn.to_asn1() for rdn in self._rdns])

    def encode(self):
        return types.encode(self.to_asn1())

    def encoded_hex(self):
        return types.encode_hex(self.to_asn1())


def name_from_param(param):
    """Builds an X500Name from any of the accepted parameter forms.

    Args:
        param: an X500Name; a oneline string; a dict with exactly one of
            "str" (oneline), "ldapstr", "certissuer" or "certsubject"
            (alias "certsubj"); or a plain {type: value} dict.

    Raises:
        error.EncodingError: the parameter cannot be turned into a name.
    """
    if isinstance(param, X500Name):
        return param
    if isinstance(param, str):
        return X500Name.from_string(param)
    if isinstance(param, dict):
        if "str" in param:
            return X500Name.from_string(param["str"])
        if "ldapstr" in param:
            return X500Name.from_ldap_string(param["ldapstr"])
        if "certissuer" in param:
            return X500Name.from_certificate_issuer(param["certissuer"])
        for key in ("certsubject", "certsubj"):
            if key in param:
                return X500Name.from_certificate_subject(param[key])
        return X500Name.from_dict(param)
    raise error.EncodingError("Invalid name parameter: %r" % (param,))
