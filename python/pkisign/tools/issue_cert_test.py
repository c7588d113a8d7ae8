#!/usr/bin/env python

import os
import shutil
import tempfile
import unittest

from absl import app
from absl.testing import flagsaver
from cryptography import x509 as crypto_x509
from cryptography.x509 import oid as crypto_oid
import mock

from pkisign.crypto import jws
from pkisign.test import test_config
from pkisign.tools import issue_cert

FLAGS = issue_cert.FLAGS


class IssueCertTest(unittest.TestCase):
    def setUp(self):
        FLAGS.mark_as_parsed()
        self.temp_dir = tempfile.mkdtemp()
        self.output = os.path.join(self.temp_dir, "cert.pem")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def flags(self, **overrides):
        values = {
            "issuer": "/C=US/O=Test Org/CN=Test CA",
            "subject": "/C=US/CN=example.com",
            "serial": "0x2a",
            "not_before": "130504235959Z",
            "not_after": "20500504235959Z",
            "subject_public_key": test_config.get_test_file_path(
                "ec_pub.pem"),
            "ca_key": test_config.get_test_file_path("rsa_key.pem"),
            "extensions": '[{"BasicConstraints": {}}, '
                          '{"SubjectAltName": {"names": [{"dns": '
                          '"example.com"}]}}]',
            "output": self.output,
            }
        values.update(overrides)
        return flagsaver.flagsaver(**values)

    def read_output(self):
        with open(self.output, "rb") as f:
            return crypto_x509.load_pem_x509_certificate(f.read())

    def test_issue(self):
        with self.flags():
            issue_cert.main(["issue_cert"])
        certificate = self.read_output()
        self.assertEqual(42, certificate.serial_number)
        self.assertEqual("CN=example.com,C=US",
                         certificate.subject.rfc4514_string())
        san = certificate.extensions.get_extension_for_class(
            crypto_x509.SubjectAlternativeName).value
        self.assertEqual(["example.com"],
                         san.get_values_for_type(crypto_x509.DNSName))

    def test_encrypted_ca_key(self):
        with self.flags(ca_key=test_config.get_test_file_path(
                "rsa_key_enc.pem"), ca_key_passphrase="secret"):
            issue_cert.main(["issue_cert"])
        self.assertEqual(42, self.read_output().serial_number)

    def test_ecdsa_ca_key(self):
        with self.flags(ca_key=test_config.get_test_file_path("ec_key.pem"),
                        signature_algorithm="SHA256withECDSA"):
            issue_cert.main(["issue_cert"])
        self.assertEqual(crypto_oid.SignatureAlgorithmOID.ECDSA_WITH_SHA256,
                         self.read_output().signature_algorithm_oid)

    def test_errors_are_usage_errors(self):
        with self.flags(extensions="[{"):
            self.assertRaises(app.UsageError, issue_cert.main, ["issue_cert"])
        with self.flags(extensions='[{"NameConstraints": {}}]'):
            self.assertRaises(app.UsageError, issue_cert.main, ["issue_cert"])
        with self.flags(signature_algorithm="SHA256withECDSA"):
            self.assertRaises(app.UsageError, issue_cert.main, ["issue_cert"])
        with self.flags():
            self.assertRaises(app.UsageError, issue_cert.main,
                              ["issue_cert", "extra"])
        self.assertFalse(os.path.exists(self.output))

    def test_parse_serial(self):
        self.assertEqual(10, issue_cert.parse_serial("10"))
        self.assertEqual(16, issue_cert.parse_serial("0x10"))
        self.assertEqual(255, issue_cert.parse_serial("0XFF"))
        self.assertRaises(app.UsageError, issue_cert.parse_serial, "ten")

    def test_parse_time(self):
        self.assertEqual("130504235959Z",
                         issue_cert.parse_time("130504235959Z"))
        self.assertEqual("20500504235959Z",
                         issue_cert.parse_time("20500504235959Z"))
        self.assertEqual("151012125959Z", issue_cert.parse_time("1444654799"))
        with mock.patch.object(jws, "get_now", return_value=1444654799):
            self.assertEqual("151013125959Z",
                             issue_cert.parse_time("now + 1day"))
        self.assertRaises(app.UsageError, issue_cert.parse_time, "tomorrow")


if __name__ == "__main__":
    unittest.main()
