"""Context-specific tagging of pyasn1 values.

X.509 only ever retags with context-specific tags: [n] IMPLICIT on
GeneralName variants and key identifiers, [n] EXPLICIT on the TBS version
and extensions.
"""

import collections

from pyasn1.codec.der import encoder
from pyasn1.type import tag as pyasn1_tag
from pyasn1.type import univ

UNIVERSAL = 0x00
APPLICATION = 0x40
CONTEXT_SPECIFIC = 0x80
PRIVATE = 0xc0
PRIMITIVE = 0x00
CONSTRUCTED = 0x20

_PYASN1_CLASSES = {
    UNIVERSAL: pyasn1_tag.tagClassUniversal,
    APPLICATION: pyasn1_tag.tagClassApplication,
    CONTEXT_SPECIFIC: pyasn1_tag.tagClassContext,
    PRIVATE: pyasn1_tag.tagClassPrivate,
    }

_PYASN1_FORMATS = {
    PRIMITIVE: pyasn1_tag.tagFormatSimple,
    CONSTRUCTED: pyasn1_tag.tagFormatConstructed,
    }


class Tag(collections.namedtuple("Tag", ["number", "tag_class", "encoding"])):
    """A low-form tag: class and encoding bits plus a number below 31."""
    __slots__ = ()

    def __new__(cls, number, tag_class, encoding):
        if tag_class not in _PYASN1_CLASSES:
            raise ValueError("Invalid tag class %s" % tag_class)
        if encoding not in _PYASN1_FORMATS:
            raise ValueError("Invalid encoding %s" % encoding)
        if not 0 <= number < 31:
            raise NotImplementedError("Tag number %d needs the high-tag "
                                      "form" % number)
        return super(Tag, cls).__new__(cls, number, tag_class, encoding)

    @property
    def value(self):
        """The identifier octet."""
        return bytes([self.tag_class | self.encoding | self.number])

    def to_pyasn1(self):
        return pyasn1_tag.Tag(_PYASN1_CLASSES[self.tag_class],
                              _PYASN1_FORMATS[self.encoding], self.number)


def context(number, encoding=PRIMITIVE):
    return Tag(number, CONTEXT_SPECIFIC, encoding)


def implicit_tag_set(asn1_type, number):
    """The tag set of asn1_type with its outer tag replaced by [number].

    Used to create constructed values (e.g. GeneralNames) that carry an
    implicit context tag from the start.
    """
    return asn1_type.tagSet.tagImplicitly(context(number).to_pyasn1())


def implicit(value, number):
    """Replaces the tag of a primitive value with the context tag [number].

    Args:
        value: a pyasn1 simple value, e.g. univ.OctetString(b"...").
        number: the context tag number.

    Returns:
        a value of the same type whose DER starts with 0x80 | number.
    """
    return value.subtype(implicitTag=context(number).to_pyasn1())


def explicit(value, number):
    """Wraps a value in the constructed context tag [number].

    Args:
        value: any pyasn1 value, or DER bytes that are already encoded.
        number: the context tag number.

    Returns:
        a value whose DER is 0xa0 | number, length, DER(value).
    """
    if not isinstance(value, bytes):
        value = encoder.encode(value)
    return univ.Any(value).subtype(
        explicitTag=context(number, CONSTRUCTED).to_pyasn1())
