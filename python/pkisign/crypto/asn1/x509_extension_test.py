#!/usr/bin/env python

import unittest

from pkisign.crypto import error
from pkisign.crypto import keys
from pkisign.crypto.asn1 import oid
from pkisign.crypto.asn1 import types
from pkisign.crypto.asn1 import x509_extension as x509_ext
from pkisign.test import test_config


def value_hex(extension):
    return extension.encode_value().hex()


class RegistryTest(unittest.TestCase):
    def test_registered_names(self):
        self.assertEqual(
            ["AuthorityInfoAccess", "AuthorityKeyIdentifier",
             "BasicConstraints", "CRLDistributionPoints", "ExtKeyUsage",
             "IssuerAltName", "KeyUsage", "SubjectAltName",
             "SubjectKeyIdentifier"],
            x509_ext.registered_names())

    def test_lookup_is_case_insensitive(self):
        extension = x509_ext.extension_from_name("basicConstraints", ca=True)
        self.assertIsInstance(extension, x509_ext.BasicConstraints)
        self.assertEqual(oid.ID_CE_BASIC_CONSTRAINTS, extension.oid())

    def test_unknown_extension(self):
        self.assertRaises(error.UnsupportedExtensionError,
                          x509_ext.extension_from_name, "NameConstraints")

    def test_invalid_parameters(self):
        self.assertRaises(error.ASN1Error, x509_ext.extension_from_name,
                          "BasicConstraints", cA=True)

    def test_append_keeps_order(self):
        extensions = []
        x509_ext.append_by_name_to_list("KeyUsage", {"bin": "1"}, extensions)
        x509_ext.append_by_name_to_list("BasicConstraints", None, extensions)
        self.assertEqual(["KeyUsage", "BasicConstraints"],
                         [e.NAME for e in extensions])
        self.assertEqual("3018" "300b0603551d0f040403020780"
                         "30090603551d1304023000",
                         types.encode_hex(
                             x509_ext.extensions_to_asn1(extensions)))

    def test_no_extensions(self):
        self.assertEqual("3000",
                         types.encode_hex(x509_ext.extensions_to_asn1([])))


class ExtensionEncodingTest(unittest.TestCase):
    def test_envelope(self):
        extension = x509_ext.BasicConstraints(ca=True, critical=True)
        self.assertEqual("300f0603551d130101ff040530030101ff",
                         extension.encode().hex())
        extension = x509_ext.BasicConstraints(ca=True)
        self.assertEqual("300c0603551d13040530030101ff",
                         extension.encode().hex())

    def test_basic_constraints(self):
        self.assertEqual("30060101ff020102", value_hex(
            x509_ext.BasicConstraints(ca=True, path_len=2)))
        self.assertEqual("3000", value_hex(x509_ext.BasicConstraints()))
        self.assertEqual("3003020100", value_hex(
            x509_ext.BasicConstraints(path_len=0)))

    def test_key_usage(self):
        self.assertEqual("03020388", value_hex(x509_ext.KeyUsage(
            names=["digitalSignature", "keyAgreement"])))
        self.assertEqual("030206c0", value_hex(x509_ext.KeyUsage(bin="11")))
        self.assertEqual("03020106", value_hex(x509_ext.KeyUsage(
            names=["keyCertSign", "cRLSign"])))
        # Trailing zero bits are dropped.
        self.assertEqual("03020780", value_hex(x509_ext.KeyUsage(bin="1000")))

    def test_key_usage_invalid(self):
        self.assertRaises(error.ASN1Error, x509_ext.KeyUsage)
        self.assertRaises(error.ASN1Error, x509_ext.KeyUsage, bin="1",
                          names=["cRLSign"])
        self.assertRaises(error.ASN1Error, x509_ext.KeyUsage,
                          names=["signEverything"])
        self.assertRaises(error.ASN1Error, x509_ext.KeyUsage, bin="12")

    def test_ext_key_usage(self):
        extension = x509_ext.ExtKeyUsage(
            purposes=["serverAuth", "1.3.6.1.5.5.7.3.2"])
        self.assertEqual("3014"
                         "06082b06010505070301"
                         "06082b06010505070302", value_hex(extension))
        extension = x509_ext.ExtKeyUsage(purposes=[{"name": "serverAuth"}])
        self.assertEqual("300a06082b06010505070301", value_hex(extension))
        self.assertRaises(error.ASN1Error, x509_ext.ExtKeyUsage,
                          purposes=[{}])

    def test_crl_distribution_points(self):
        expected = "3010300ea00ca00a8608687474703a2f2f61"
        self.assertEqual(expected, value_hex(
            x509_ext.CRLDistributionPoints(uri="http://a")))
        self.assertEqual(expected, value_hex(
            x509_ext.CRLDistributionPoints(points=["http://a"])))
        self.assertEqual(expected, value_hex(
            x509_ext.CRLDistributionPoints(points=[[{"uri": "http://a"}]])))
        self.assertRaises(error.ASN1Error, x509_ext.CRLDistributionPoints)

    def test_authority_key_identifier(self):
        self.assertEqual("300480020102", value_hex(
            x509_ext.AuthorityKeyIdentifier(kid="0102")))
        self.assertEqual("300780020102820105", value_hex(
            x509_ext.AuthorityKeyIdentifier(kid={"hex": "0102"}, sn=5)))
        self.assertEqual(
            "3012a110a40e300c310a300806035504030c0161",
            value_hex(x509_ext.AuthorityKeyIdentifier(issuer="/CN=a")))

    def test_key_identifier_from_key(self):
        key = keys.get_key(test_config.read_test_file("rsa_key.pem"))
        self.assertEqual(
            "0414f03f1701f5fb25cb3ec4d4dfc1fef9ddb2d27e6d",
            value_hex(x509_ext.SubjectKeyIdentifier(kid=key)))
        self.assertEqual(
            "30168014f03f1701f5fb25cb3ec4d4dfc1fef9ddb2d27e6d",
            value_hex(x509_ext.AuthorityKeyIdentifier(kid=key)))

    def test_subject_key_identifier(self):
        self.assertEqual("04020a0b", value_hex(
            x509_ext.SubjectKeyIdentifier(kid=b"\x0a\x0b")))

    def test_authority_info_access(self):
        extension = x509_ext.AuthorityInfoAccess([
            {"access_method": "ocsp",
             "access_location": {"uri": "http://o"}}])
        self.assertEqual("30163014" "06082b06010505073001"
                         "8608687474703a2f2f6f", value_hex(extension))
        extension = x509_ext.AuthorityInfoAccess([
            {"access_method": {"oid": "1.3.6.1.5.5.7.48.2"},
             "access_location": {"uri": "http://o"}}])
        self.assertEqual("30163014" "06082b06010505073002"
                         "8608687474703a2f2f6f", value_hex(extension))
        self.assertRaises(error.ASN1Error, x509_ext.AuthorityInfoAccess,
                          [{"access_method": "ocsp"}])

    def test_alt_names(self):
        extension = x509_ext.SubjectAltName(names=[{"dns": "a"},
                                                   {"ip": "10.0.0.1"}])
        self.assertEqual("30098201618704" "0a000001", value_hex(extension))
        self.assertEqual(oid.ID_CE_SUBJECT_ALT_NAME, extension.oid())
        extension = x509_ext.IssuerAltName(names=[{"rfc822": "a@b"}])
        self.assertEqual("30058103614062", value_hex(extension))
        self.assertEqual(oid.ID_CE_ISSUER_ALT_NAME, extension.oid())


if __name__ == "__main__":
    unittest.main()
