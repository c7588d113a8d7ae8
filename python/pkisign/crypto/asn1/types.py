"""
Building ASN.1 values.

Everything in this package assembles pyasn1 *value* objects and hands them to
the pyasn1 DER encoder. We deliberately do not instantiate the pyasn1-modules
schema classes for the structures we emit: the RFC 5280 schema would insist
that every CHOICE and ANY is filled through its own typed component, while
our encoders already know the exact shape they want. Instead we use untyped
SEQUENCE, SEQUENCE OF and SET OF containers, which accept any value in any
position, and pre-encoded blobs (univ.Any) where a value arrives as DER.

In the pyasn1 data model a freshly created container is a *schema* object:
it has no value and cannot be encoded, not even as an empty SEQUENCE. The
helpers below therefore always clear() a container before filling it, which
turns it into an (empty) value object.
"""

import binascii

from pyasn1 import error as pyasn1_error
from pyasn1.codec.der import encoder
from pyasn1.type import char, univ

from pkisign.crypto import encoding
from pkisign.crypto import error


def sequence(components=(), tag_set=None):
    """An untyped SEQUENCE holding components in order."""
    if tag_set is None:
        value = univ.Sequence()
    else:
        value = univ.Sequence(tagSet=tag_set)
    value.clear()
    for idx, component in enumerate(components):
        value.setComponentByPosition(idx, component)
    return value


def sequence_of(components=(), tag_set=None):
    """An untyped SEQUENCE OF holding components in order."""
    if tag_set is None:
        value = univ.SequenceOf()
    else:
        value = univ.SequenceOf(tagSet=tag_set)
    value.clear()
    for idx, component in enumerate(components):
        value.setComponentByPosition(idx, component)
    return value


def set_of(components=()):
    """An untyped SET OF. The DER encoder emits components sorted."""
    value = univ.SetOf()
    value.clear()
    for idx, component in enumerate(components):
        value.setComponentByPosition(idx, component)
    return value


def raw(der):
    """A pre-encoded value that is copied verbatim into the output."""
    return univ.Any(der)


def encode(value):
    """DER encoding of a pyasn1 value.

    Raises:
        error.ASN1Error: pyasn1 rejected the value.
    """
    try:
        return encoder.encode(value)
    except pyasn1_error.PyAsn1Error as e:
        raise error.ASN1Error("Unable to encode %s: %s" %
                              (value.__class__.__name__, e))


def encode_hex(value):
    return encoding.bytes_to_hex(encode(value))


def integer(param):
    """An INTEGER from an int, a hex string, or {"int": n} / {"hex": h}.

    Hex strings are read as unsigned big-endian numbers.
    """
    if isinstance(param, dict):
        if "int" in param:
            param = param["int"]
        elif "hex" in param:
            param = _hex_to_int(param["hex"])
        else:
            raise error.ASN1Error("Invalid integer parameter: %r" % param)
    elif isinstance(param, str):
        param = _hex_to_int(param)
    if isinstance(param, bool) or not isinstance(param, int):
        raise error.ASN1Error("Invalid integer parameter: %r" % param)
    return univ.Integer(param)


def _hex_to_int(hex_string):
    try:
        return int(hex_string, 16)
    except ValueError:
        raise error.ASN1Error("Invalid hex integer: %r" % hex_string)


def octet_string_bytes(param):
    """Bytes for an OCTET STRING given bytes, hex, or {"hex": h}."""
    if isinstance(param, dict):
        if "hex" not in param:
            raise error.ASN1Error("Invalid octet string parameter: %r" % param)
        param = param["hex"]
    if isinstance(param, str):
        try:
            return binascii.unhexlify(param)
        except (binascii.Error, ValueError):
            raise error.ASN1Error("Invalid hex octet string: %r" % param)
    if isinstance(param, bytes):
        return param
    raise error.ASN1Error("Invalid octet string parameter: %r" % param)


def bit_string_from_bin(binary_string):
    """A BIT STRING from a string of "0"/"1" characters, first bit first."""
    if binary_string.strip("01"):
        raise error.ASN1Error("Invalid binary string: %r" % binary_string)
    return univ.BitString(binValue=binary_string)


UTF8 = "utf8"
PRINTABLE = "prn"
TELETEX = "tel"
IA5 = "ia5"

_DIRECTORY_STRING_TYPES = {
    UTF8: char.UTF8String,
    PRINTABLE: char.PrintableString,
    TELETEX: char.TeletexString,
    IA5: char.IA5String,
    }


def directory_string(value, string_type=UTF8):
    """A character string of one of the DirectoryString flavours.

    Args:
        value: the text.
        string_type: one of UTF8, PRINTABLE, TELETEX or IA5.

    Raises:
        error.ASN1Error: unknown string type.
    """
    try:
        string_class = _DIRECTORY_STRING_TYPES[string_type]
    except KeyError:
        raise error.ASN1Error("Unknown string type: %s" % string_type)
    return string_class(value)
