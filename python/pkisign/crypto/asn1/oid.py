"""ASN.1 object identifiers. This module contains a dictionary of known OIDs
and the name lookups used when building certificates."""

import re

from pyasn1.type import univ

from pkisign.crypto import error


class ObjectIdentifier(univ.ObjectIdentifier):
    """An OID that knows its names from the table below."""

    def oid(self):
        """Dotted-decimal form, e.g. "2.5.29.19"."""
        return str(self)

    def _names(self):
        return _OID_NAME_DICT.get(self)

    def short_name(self):
        """E.g. "SHA256withRSA" or "CN"; the dotted form for unknown OIDs."""
        names = self._names()
        return names[1] if names else self.oid()

    def long_name(self):
        """E.g. "sha256WithRSAEncryption"; the dotted form for unknown OIDs."""
        names = self._names()
        return names[0] if names else self.oid()


# Public key algorithms
# RFC 3279
RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.1")
ID_DSA = ObjectIdentifier("1.2.840.10040.4.1")
ID_EC_PUBLICKEY = ObjectIdentifier("1.2.840.10045.2.1")

# Signature algorithms
# RFC 3279, RFC 4055, RFC 5758
MD5_WITH_RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.4")
SHA1_WITH_RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.5")
SHA224_WITH_RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.14")
SHA256_WITH_RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.11")
SHA384_WITH_RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.12")
SHA512_WITH_RSA_ENCRYPTION = ObjectIdentifier("1.2.840.113549.1.1.13")
ID_DSA_WITH_SHA1 = ObjectIdentifier("1.2.840.10040.4.3")
ID_DSA_WITH_SHA224 = ObjectIdentifier("2.16.840.1.101.3.4.3.1")
ID_DSA_WITH_SHA256 = ObjectIdentifier("2.16.840.1.101.3.4.3.2")
ECDSA_WITH_SHA1 = ObjectIdentifier("1.2.840.10045.4.1")
ECDSA_WITH_SHA224 = ObjectIdentifier("1.2.840.10045.4.3.1")
ECDSA_WITH_SHA256 = ObjectIdentifier("1.2.840.10045.4.3.2")
ECDSA_WITH_SHA384 = ObjectIdentifier("1.2.840.10045.4.3.3")
ECDSA_WITH_SHA512 = ObjectIdentifier("1.2.840.10045.4.3.4")

# Naming attributes (RFC 5280)
ID_AT_NAME = ObjectIdentifier("2.5.4.41")
ID_AT_SURNAME = ObjectIdentifier("2.5.4.4")
ID_AT_GIVEN_NAME = ObjectIdentifier("2.5.4.42")
ID_AT_INITIALS = ObjectIdentifier("2.5.4.43")
ID_AT_GENERATION_QUALIFIER = ObjectIdentifier("2.5.4.44")
ID_AT_COMMON_NAME = ObjectIdentifier("2.5.4.3")
ID_AT_LOCALITY_NAME = ObjectIdentifier("2.5.4.7")
ID_AT_STATE_OR_PROVINCE_NAME = ObjectIdentifier("2.5.4.8")
ID_AT_ORGANIZATION_NAME = ObjectIdentifier("2.5.4.10")
ID_AT_ORGANIZATIONAL_UNIT_NAME = ObjectIdentifier("2.5.4.11")
ID_AT_TITLE = ObjectIdentifier("2.5.4.12")
ID_AT_DN_QUALIFIER = ObjectIdentifier("2.5.4.46")
ID_AT_COUNTRY_NAME = ObjectIdentifier("2.5.4.6")
ID_AT_SERIAL_NUMBER = ObjectIdentifier("2.5.4.5")
ID_AT_PSEUDONYM = ObjectIdentifier("2.5.4.65")
ID_DOMAIN_COMPONENT = ObjectIdentifier("0.9.2342.19200300.100.1.25")
ID_USER_ID = ObjectIdentifier("0.9.2342.19200300.100.1.1")
ID_EMAIL_ADDRESS = ObjectIdentifier("1.2.840.113549.1.9.1")

# Other naming attributes commonly found in certs
ID_AT_STREET_ADDRESS = ObjectIdentifier("2.5.4.9")
ID_AT_DESCRIPTION = ObjectIdentifier("2.5.4.13")
ID_AT_BUSINESS_CATEGORY = ObjectIdentifier("2.5.4.15")
ID_AT_POSTAL_CODE = ObjectIdentifier("2.5.4.17")
ID_AT_POST_OFFICE_BOX = ObjectIdentifier("2.5.4.18")

# Standard X509v3 certificate extensions
ID_CE_AUTHORITY_KEY_IDENTIFIER = ObjectIdentifier("2.5.29.35")
ID_CE_SUBJECT_KEY_IDENTIFIER = ObjectIdentifier("2.5.29.14")
ID_CE_KEY_USAGE = ObjectIdentifier("2.5.29.15")
ID_CE_SUBJECT_ALT_NAME = ObjectIdentifier("2.5.29.17")
ID_CE_ISSUER_ALT_NAME = ObjectIdentifier("2.5.29.18")
ID_CE_BASIC_CONSTRAINTS = ObjectIdentifier("2.5.29.19")
ID_CE_EXT_KEY_USAGE = ObjectIdentifier("2.5.29.37")
ID_CE_CRL_DISTRIBUTION_POINTS = ObjectIdentifier("2.5.29.31")
ID_PE_AUTHORITY_INFO_ACCESS = ObjectIdentifier("1.3.6.1.5.5.7.1.1")

# RFC 5280 - Used in ExtendedKeyUsage extension
ANY_EXTENDED_KEY_USAGE = ObjectIdentifier("2.5.29.37.0")
ID_KP_SERVER_AUTH = ObjectIdentifier("1.3.6.1.5.5.7.3.1")
ID_KP_CLIENT_AUTH = ObjectIdentifier("1.3.6.1.5.5.7.3.2")
ID_KP_CODE_SIGNING = ObjectIdentifier("1.3.6.1.5.5.7.3.3")
ID_KP_EMAIL_PROTECTION = ObjectIdentifier("1.3.6.1.5.5.7.3.4")
ID_KP_TIME_STAMPING = ObjectIdentifier("1.3.6.1.5.5.7.3.8")
ID_KP_OCSP_SIGNING = ObjectIdentifier("1.3.6.1.5.5.7.3.9")

# RFC 5280 - Used in Authority Info Access extension
ID_AD_OCSP = ObjectIdentifier("1.3.6.1.5.5.7.48.1")
ID_AD_CA_ISSUERS = ObjectIdentifier("1.3.6.1.5.5.7.48.2")

_OID_NAME_DICT = {
    # Object identifier long names taken verbatim from the RFCs.
    # Short names follow the Java naming used for signature
    # algorithms and the OpenSSL naming used for DN attributes.
    RSA_ENCRYPTION: ("rsaEncryption", "RSA"),
    ID_DSA: ("id-dsa", "DSA"),
    ID_EC_PUBLICKEY: ("id-ecPublicKey", "EC"),
    MD5_WITH_RSA_ENCRYPTION: ("md5WithRSAEncryption", "MD5withRSA"),
    SHA1_WITH_RSA_ENCRYPTION: ("sha1WithRSAEncryption", "SHA1withRSA"),
    SHA224_WITH_RSA_ENCRYPTION: ("sha224WithRSAEncryption", "SHA224withRSA"),
    SHA256_WITH_RSA_ENCRYPTION: ("sha256WithRSAEncryption", "SHA256withRSA"),
    SHA384_WITH_RSA_ENCRYPTION: ("sha384WithRSAEncryption", "SHA384withRSA"),
    SHA512_WITH_RSA_ENCRYPTION: ("sha512WithRSAEncryption", "SHA512withRSA"),
    ID_DSA_WITH_SHA1: ("id-dsa-with-sha1", "SHA1withDSA"),
    ID_DSA_WITH_SHA224: ("id-dsa-with-sha224", "SHA224withDSA"),
    ID_DSA_WITH_SHA256: ("id-dsa-with-sha256", "SHA256withDSA"),
    ECDSA_WITH_SHA1: ("ecdsa-with-SHA1", "SHA1withECDSA"),
    ECDSA_WITH_SHA224: ("ecdsa-with-SHA224", "SHA224withECDSA"),
    ECDSA_WITH_SHA256: ("ecdsa-with-SHA256", "SHA256withECDSA"),
    ECDSA_WITH_SHA384: ("ecdsa-with-SHA384", "SHA384withECDSA"),
    ECDSA_WITH_SHA512: ("ecdsa-with-SHA512", "SHA512withECDSA"),
    ID_AT_NAME: ("id-at-name", "name"),
    ID_AT_SURNAME: ("id-at-surname", "SN"),
    ID_AT_GIVEN_NAME: ("id-at-givenName", "GN"),
    ID_AT_INITIALS: ("id-at-initials", "initials"),
    ID_AT_GENERATION_QUALIFIER: ("id-at-generationQualifier",
                                 "generationQualifier"),
    ID_AT_COMMON_NAME: ("id-at-commonName", "CN"),
    ID_AT_LOCALITY_NAME: ("id-at-localityName", "L"),
    ID_AT_STATE_OR_PROVINCE_NAME: ("id-at-stateOrProvinceName", "ST"),
    ID_AT_ORGANIZATION_NAME: ("id-at-organizationName", "O"),
    ID_AT_ORGANIZATIONAL_UNIT_NAME: ("id-at-organizationalUnitName", "OU"),
    ID_AT_TITLE: ("id-at-title", "T"),
    ID_AT_DN_QUALIFIER: ("id-at-dnQualifier", "dnQualifier"),
    ID_AT_COUNTRY_NAME: ("id-at-countryName", "C"),
    ID_AT_SERIAL_NUMBER: ("id-at-serialNumber", "serialNumber"),
    ID_AT_PSEUDONYM: ("id-at-pseudonym", "pseudonym"),
    ID_DOMAIN_COMPONENT: ("id-domainComponent", "DC"),
    ID_USER_ID: ("id-userId", "UID"),
    ID_EMAIL_ADDRESS: ("id-emailAddress", "E"),
    ID_AT_STREET_ADDRESS: ("id-at-streetAddress", "STREET"),
    ID_AT_DESCRIPTION: ("id-at-description", "description"),
    ID_AT_BUSINESS_CATEGORY: ("id-at-businessCategory", "businessCategory"),
    ID_AT_POSTAL_CODE: ("id-at-postalCode", "postalCode"),
    ID_AT_POST_OFFICE_BOX: ("id-at-postOfficeBox", "postOfficeBox"),
    ID_CE_AUTHORITY_KEY_IDENTIFIER: ("id-ce-authorityKeyIdentifier",
                                     "authorityKeyIdentifier"),
    ID_CE_SUBJECT_KEY_IDENTIFIER: ("id-ce-subjectKeyIdentifier",
                                   "subjectKeyIdentifier"),
    ID_CE_KEY_USAGE: ("id-ce-keyUsage", "keyUsage"),
    ID_CE_SUBJECT_ALT_NAME: ("id-ce-subjectAltName", "subjectAltName"),
    ID_CE_ISSUER_ALT_NAME: ("id-ce-issuerAltName", "issuerAltName"),
    ID_CE_BASIC_CONSTRAINTS: ("id-ce-basicConstraints", "basicConstraints"),
    ID_CE_EXT_KEY_USAGE: ("id-ce-extKeyUsage", "extKeyUsage"),
    ID_CE_CRL_DISTRIBUTION_POINTS: ("id-ce-cRLDistributionPoints",
                                    "cRLDistributionPoints"),
    ID_PE_AUTHORITY_INFO_ACCESS: ("id-pe-authorityInfoAccess",
                                  "authorityInfoAccess"),

    ANY_EXTENDED_KEY_USAGE: ("anyExtendedKeyUsage", "anyExtendedKeyUsage"),
    ID_KP_SERVER_AUTH: ("id-kp-serverAuth", "serverAuth"),
    ID_KP_CLIENT_AUTH: ("id-kp-clientAuth", "clientAuth"),
    ID_KP_CODE_SIGNING: ("id-kp-codeSigning", "codeSigning"),
    ID_KP_EMAIL_PROTECTION: ("id-kp-emailProtection", "emailProtection"),
    ID_KP_TIME_STAMPING: ("id-kp-timeStamping", "timeStamping"),
    ID_KP_OCSP_SIGNING: ("id-kp-OCSPSigning", "OCSPSigning"),

    ID_AD_OCSP: ("id-ad-ocsp", "ocsp"),
    ID_AD_CA_ISSUERS: ("id-ad-caIssuers", "caIssuers"),
    }

# Extra spellings accepted for DN attribute types.
_ATTRIBUTE_ALIASES = {
    "emailAddress": ID_EMAIL_ADDRESS,
    "surname": ID_AT_SURNAME,
    "givenName": ID_AT_GIVEN_NAME,
    "title": ID_AT_TITLE,
    "street": ID_AT_STREET_ADDRESS,
    "domainComponent": ID_DOMAIN_COMPONENT,
    }

_ATTRIBUTE_TYPES = frozenset([
    ID_AT_NAME, ID_AT_SURNAME, ID_AT_GIVEN_NAME, ID_AT_INITIALS,
    ID_AT_GENERATION_QUALIFIER, ID_AT_COMMON_NAME, ID_AT_LOCALITY_NAME,
    ID_AT_STATE_OR_PROVINCE_NAME, ID_AT_ORGANIZATION_NAME,
    ID_AT_ORGANIZATIONAL_UNIT_NAME, ID_AT_TITLE, ID_AT_DN_QUALIFIER,
    ID_AT_COUNTRY_NAME, ID_AT_SERIAL_NUMBER, ID_AT_PSEUDONYM,
    ID_DOMAIN_COMPONENT, ID_USER_ID, ID_EMAIL_ADDRESS, ID_AT_STREET_ADDRESS,
    ID_AT_DESCRIPTION, ID_AT_BUSINESS_CATEGORY, ID_AT_POSTAL_CODE,
    ID_AT_POST_OFFICE_BOX])

_SIGNATURE_ALGORITHMS = frozenset([
    MD5_WITH_RSA_ENCRYPTION, SHA1_WITH_RSA_ENCRYPTION,
    SHA224_WITH_RSA_ENCRYPTION, SHA256_WITH_RSA_ENCRYPTION,
    SHA384_WITH_RSA_ENCRYPTION, SHA512_WITH_RSA_ENCRYPTION,
    ID_DSA_WITH_SHA1, ID_DSA_WITH_SHA224, ID_DSA_WITH_SHA256,
    ECDSA_WITH_SHA1, ECDSA_WITH_SHA224, ECDSA_WITH_SHA256,
    ECDSA_WITH_SHA384, ECDSA_WITH_SHA512])

_DOTTED_OID_RE = re.compile(r"^[0-2](\.[0-9]+)+$")

_NAME_OID_DICT = {}
for _oid, (_long, _short) in _OID_NAME_DICT.items():
    _NAME_OID_DICT[_long] = _oid
    _NAME_OID_DICT[_short] = _oid
_NAME_OID_DICT.update(_ATTRIBUTE_ALIASES)
_LOWER_NAME_OID_DICT = dict((k.lower(), v) for k, v in _NAME_OID_DICT.items())


def is_dotted_oid(value):
    return bool(_DOTTED_OID_RE.match(value))


def name_to_oid(name):
    """Looks up an OID by short name, long name or dotted form.

    Args:
        name: e.g. "SHA256withRSA", "serverAuth", "2.5.29.19".

    Returns:
        an ObjectIdentifier.

    Raises:
        error.ASN1Error: the name is not known.
    """
    if isinstance(name, univ.ObjectIdentifier):
        return ObjectIdentifier(name)
    if is_dotted_oid(name):
        return ObjectIdentifier(name)
    try:
        return _NAME_OID_DICT[name]
    except KeyError:
        pass
    try:
        return _LOWER_NAME_OID_DICT[name.lower()]
    except KeyError:
        raise error.ASN1Error("Unknown OID name: %s" % name)


def attribute_short_name_to_oid(name):
    """Resolves a DN attribute type such as "CN" or "2.5.4.3".

    Raises:
        error.UnknownASN1AttributeTypeError: not a known attribute type.
    """
    if is_dotted_oid(name):
        return ObjectIdentifier(name)
    oid = _NAME_OID_DICT.get(name)
    if oid is None:
        oid = _LOWER_NAME_OID_DICT.get(name.lower())
    if oid is None or oid not in _ATTRIBUTE_TYPES:
        raise error.UnknownASN1AttributeTypeError(
            "Unknown attribute type: %s" % name)
    return oid


def signature_algorithm_oid(name):
    """Resolves a signature algorithm name such as "SHA256withECDSA".

    Raises:
        error.UnsupportedAlgorithmError: not a known signature algorithm.
    """
    try:
        oid = name_to_oid(name)
    except error.ASN1Error:
        oid = None
    if oid is None or (oid not in _SIGNATURE_ALGORITHMS and
                       not is_dotted_oid(name)):
        raise error.UnsupportedAlgorithmError(
            "Unsupported signature algorithm: %s" % name)
    return oid
