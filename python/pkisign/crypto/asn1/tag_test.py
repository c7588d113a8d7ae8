#!/usr/bin/env python

import unittest

from pyasn1.codec.der import encoder
from pyasn1.type import univ

from pkisign.crypto.asn1 import tag


class TagTest(unittest.TestCase):
    def test_identifier_octets(self):
        cases = (
            (tag.Tag(16, tag.UNIVERSAL, tag.CONSTRUCTED), b"\x30"),
            (tag.Tag(1, tag.APPLICATION, tag.CONSTRUCTED), b"\x61"),
            (tag.context(0), b"\x80"),
            (tag.context(7), b"\x87"),
            (tag.context(0, tag.CONSTRUCTED), b"\xa0"),
            (tag.context(3, tag.CONSTRUCTED), b"\xa3"),
            (tag.Tag(1, tag.PRIVATE, tag.CONSTRUCTED), b"\xe1"),
            )
        for t, octet in cases:
            self.assertEqual(octet, t.value, t)
        self.assertEqual(len(cases), len(set(t for t, _ in cases)))
        self.assertEqual(tag.context(2), tag.Tag(2, tag.CONTEXT_SPECIFIC,
                                                 tag.PRIMITIVE))

    def test_invalid_tags(self):
        self.assertRaises(ValueError, tag.Tag, 0, 0x10, tag.PRIMITIVE)
        self.assertRaises(ValueError, tag.Tag, 0, tag.UNIVERSAL, 0x01)
        self.assertRaises(NotImplementedError, tag.context, 31)

    def test_implicit(self):
        value = tag.implicit(univ.OctetString(b"\x01\x02"), 0)
        self.assertEqual(b"\x80\x02\x01\x02", encoder.encode(value))
        value = tag.implicit(univ.Integer(5), 2)
        self.assertEqual(b"\x82\x01\x05", encoder.encode(value))

    def test_explicit(self):
        self.assertEqual(b"\xa0\x03\x02\x01\x02",
                         encoder.encode(tag.explicit(univ.Integer(2), 0)))
        self.assertEqual(b"\xa3\x02\x30\x00",
                         encoder.encode(tag.explicit(b"\x30\x00", 3)))

    def test_implicit_tag_set(self):
        value = univ.SequenceOf(
            tagSet=tag.implicit_tag_set(univ.SequenceOf, 1))
        value.clear()
        value.setComponentByPosition(0, univ.Integer(1))
        self.assertEqual(b"\xa1\x03\x02\x01\x01", encoder.encode(value))


if __name__ == "__main__":
    unittest.main()
