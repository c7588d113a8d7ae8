#!/usr/bin/env python

import unittest

from pkisign.crypto import encoding
from pkisign.crypto import error


class EncodingTest(unittest.TestCase):
    def test_b64url_encode_strips_padding(self):
        self.assertEqual("YQ", encoding.b64url_encode(b"a"))
        self.assertEqual("YWI", encoding.b64url_encode("ab"))
        self.assertEqual("YWJj", encoding.b64url_encode(b"abc"))

    def test_b64url_uses_url_alphabet(self):
        self.assertEqual("-_8", encoding.b64url_encode(b"\xfb\xff"))
        self.assertEqual(b"\xfb\xff", encoding.b64url_decode("-_8"))

    def test_b64url_decode_invalid(self):
        self.assertRaises(error.EncodingError, encoding.b64url_decode, "a")
        self.assertRaises(error.EncodingError, encoding.b64url_decode,
                          "éé")
        for text in ("YWJj!!", "YW Jj", "YWJj\n", "YW+j", "YQ==", b"YW/j"):
            self.assertRaises(error.EncodingError, encoding.b64url_decode,
                              text)

    def test_b64_decode(self):
        self.assertEqual(b"abc", encoding.b64_decode("YWJj"))
        self.assertRaises(error.EncodingError, encoding.b64_decode, "YW$j")

    def test_b64url_to_utf8(self):
        self.assertEqual(u"é", encoding.b64url_to_utf8("w6k"))
        self.assertRaises(error.EncodingError, encoding.b64url_to_utf8, "_w")

    def test_hex_conversions(self):
        self.assertEqual(b"\x01\xab", encoding.hex_to_bytes("01AB"))
        self.assertEqual("01ab", encoding.bytes_to_hex(b"\x01\xab"))
        self.assertEqual("Aas", encoding.hex_to_b64url("01ab"))
        self.assertEqual("01ab", encoding.b64url_to_hex("Aas"))
        self.assertRaises(error.EncodingError, encoding.hex_to_bytes, "abc")
        self.assertRaises(error.EncodingError, encoding.hex_to_bytes, "zz")

    def test_is_hex(self):
        self.assertTrue(encoding.is_hex("00ff"))
        self.assertTrue(encoding.is_hex("ABCD"))
        self.assertFalse(encoding.is_hex(""))
        self.assertFalse(encoding.is_hex("abc"))
        self.assertFalse(encoding.is_hex("0x12"))
        self.assertFalse(encoding.is_hex("+1ab"))
        self.assertFalse(encoding.is_hex("a_bc"))
        self.assertFalse(encoding.is_hex(b"00ff"))


if __name__ == "__main__":
    unittest.main()
