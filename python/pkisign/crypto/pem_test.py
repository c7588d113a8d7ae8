#!/usr/bin/env python

import unittest

from pkisign.crypto import pem
from pkisign.test import test_config


class PemTest(unittest.TestCase):
    BLOB = bytes(range(100))

    def test_to_pem_wraps_lines(self):
        armored = pem.to_pem(self.BLOB, "TEST")
        lines = armored.splitlines()
        self.assertEqual("-----BEGIN TEST-----", lines[0])
        self.assertEqual("-----END TEST-----", lines[-1])
        self.assertEqual(64, len(lines[1]))
        self.assertTrue(all(len(line) <= 64 for line in lines[1:-1]))
        self.assertTrue(armored.endswith("-----\n"))

    def test_from_pem_round_trip(self):
        armored = pem.to_pem(self.BLOB, "TEST")
        self.assertEqual((self.BLOB, "TEST"),
                         pem.from_pem("junk\n" + armored + "junk", ["TEST"]))
        self.assertEqual((self.BLOB, "TEST"),
                         pem.from_pem(armored.encode("ascii"), ["TEST"]))

    def test_from_pem_picks_marker(self):
        armored = pem.to_pem(b"one", "ONE") + pem.to_pem(b"two", "TWO")
        self.assertEqual((b"two", "TWO"), pem.from_pem(armored, ["TWO"]))
        self.assertEqual(2, len(list(pem.pem_blocks(armored))))

    def test_from_pem_missing_marker(self):
        armored = pem.to_pem(self.BLOB, "TEST")
        self.assertRaises(pem.PemError, pem.from_pem, armored, ["CERTIFICATE"])
        self.assertRaises(pem.PemError, pem.from_pem, "no pem", ["TEST"])

    def test_from_pem_invalid_base64(self):
        armored = "-----BEGIN TEST-----\nAB$C\n-----END TEST-----\n"
        self.assertRaises(pem.PemError, pem.from_pem, armored, ["TEST"])

    def test_hex_conversions(self):
        armored = pem.hex_to_pem("0102", "TEST")
        self.assertEqual("0102", pem.pem_to_hex(armored, "TEST"))

    def test_reads_openssl_certificate(self):
        cert_pem = test_config.read_test_file("ca_cert.pem")
        der, marker = pem.from_pem(cert_pem, ["CERTIFICATE"])
        self.assertEqual("CERTIFICATE", marker)
        self.assertEqual(0x30, der[0])


if __name__ == "__main__":
    unittest.main()
