#!/usr/bin/env python

import unittest

from pkisign.crypto import error
from pkisign.crypto import name
from pkisign.test import test_config

# Subject of ca_cert.pem, as encoded by OpenSSL.
CA_SUBJECT_HEX = ("3032310b30090603550406130255533111300f060355040a0c0854"
                  "657374204f72673110300e06035504030c0754657374204341")


class IpAddressTest(unittest.TestCase):
    def test_ipv4(self):
        self.assertEqual(b"\xc0\xa8\x00\x01",
                         name.ip_address_to_bytes("192.168.0.1"))

    def test_ipv6(self):
        self.assertEqual(b"\x20\x01\x0d\xb8" + b"\x00" * 11 + b"\x01",
                         name.ip_address_to_bytes("2001:db8::1"))

    def test_hex(self):
        self.assertEqual(b"\x0a\x00\x00\x01",
                         name.ip_address_to_bytes("0a000001"))

    def test_ipv4_octets_are_range_checked(self):
        self.assertRaises(error.EncodingError, name.ip_address_to_bytes,
                          "256.1.1.1")
        self.assertRaises(error.EncodingError, name.ip_address_to_bytes,
                          "1.2.3")

    def test_malformed(self):
        for address in ("example.com", "", "abc", "1:2:3:4:5:6:7:8:9"):
            self.assertRaises(error.EncodingError, name.ip_address_to_bytes,
                              address)


class GeneralNameTest(unittest.TestCase):
    def test_ia5_variants(self):
        self.assertEqual(b"\x81\x03a@b",
                         name.GeneralName(rfc822="a@b").encode())
        self.assertEqual(b"\x82\x0bexample.com",
                         name.GeneralName(dns="example.com").encode())
        self.assertEqual(b"\x86\x08http://a",
                         name.GeneralName(uri="http://a").encode())

    def test_ip(self):
        gn = name.GeneralName(ip="10.0.0.1")
        self.assertEqual(name.IP_ADDRESS_NAME, gn.type())
        self.assertEqual("10.0.0.1", gn.value())
        self.assertEqual(b"\x87\x04\x0a\x00\x00\x01", gn.encode())

    def test_directory_name_is_explicit(self):
        expected = bytes.fromhex("a434" + CA_SUBJECT_HEX)
        cert_pem = test_config.read_test_file("ca_cert.pem")
        for params in ({"dn": "/C=US/O=Test Org/CN=Test CA"},
                       {"dn": {"str": "/C=US/O=Test Org/CN=Test CA"}},
                       {"ldapdn": "CN=Test CA,O=Test Org,C=US"},
                       {"certissuer": cert_pem},
                       {"certsubj": cert_pem}):
            gn = name.GeneralName(**params)
            self.assertEqual(name.DIRECTORY_NAME, gn.type())
            self.assertEqual(expected, gn.encode())

    def test_needs_exactly_one_variant(self):
        self.assertRaises(error.UnsupportedGeneralNameError, name.GeneralName)
        self.assertRaises(error.UnsupportedGeneralNameError, name.GeneralName,
                          dns="a", uri="b")
        self.assertRaises(error.UnsupportedGeneralNameError, name.GeneralName,
                          x400="a")

    def test_malformed_value_fails_at_construction(self):
        self.assertRaises(error.EncodingError, name.GeneralName, ip="a.b")
        self.assertRaises(error.EncodingError, name.GeneralName, dn="C=US")


class GeneralNamesTest(unittest.TestCase):
    def test_sequence(self):
        names = name.GeneralNames([{"dns": "a"}, name.GeneralName(ip="0a0b")])
        self.assertEqual(2, len(names.names()))
        self.assertEqual(b"\x30\x07\x82\x01a\x87\x02\x0a\x0b", names.encode())

    def test_implicit_tag(self):
        names = name.GeneralNames([{"uri": "a"}], tag_number=0)
        self.assertEqual(b"\xa0\x03\x86\x01a", names.encode())


if __name__ == "__main__":
    unittest.main()
