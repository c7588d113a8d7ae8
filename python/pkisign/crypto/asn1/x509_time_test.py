#!/usr/bin/env python

import datetime
import unittest

from pkisign.crypto import error
from pkisign.crypto.asn1 import types
from pkisign.crypto.asn1 import x509_time


class X509TimeTest(unittest.TestCase):
    def test_time_type_of(self):
        self.assertEqual(x509_time.UTC_TIME,
                         x509_time.time_type_of("130504235959Z"))
        self.assertEqual(x509_time.GENERALIZED_TIME,
                         x509_time.time_type_of("20130504235959Z"))
        self.assertRaises(error.ASN1Error, x509_time.time_type_of, "2013Z")
        self.assertRaises(error.ASN1Error, x509_time.time_type_of,
                          "130504235959")

    def test_zulu_to_seconds(self):
        self.assertEqual(0, x509_time.zulu_to_seconds("700101000000Z"))
        self.assertEqual(1444654799,
                         x509_time.zulu_to_seconds("151012125959Z"))
        self.assertEqual(1444654799,
                         x509_time.zulu_to_seconds("20151012125959Z"))

    def test_utc_time_century(self):
        self.assertEqual(2524607999,
                         x509_time.zulu_to_seconds("491231235959Z"))
        self.assertEqual(-631152000,
                         x509_time.zulu_to_seconds("500101000000Z"))

    def test_invalid_date(self):
        self.assertRaises(error.ASN1Error, x509_time.zulu_to_seconds,
                          "131304235959Z")

    def test_seconds_to_zulu(self):
        self.assertEqual("19700101000000Z", x509_time.seconds_to_zulu(0))
        self.assertEqual("700101000000Z",
                         x509_time.seconds_to_zulu(0, x509_time.UTC_TIME))

    def test_datetime_to_zulu(self):
        self.assertEqual("130504235959Z", x509_time.datetime_to_zulu(
            datetime.datetime(2013, 5, 4, 23, 59, 59)))
        self.assertEqual("20500101000000Z", x509_time.datetime_to_zulu(
            datetime.datetime(2050, 1, 1)))
        self.assertEqual("19491231235959Z", x509_time.datetime_to_zulu(
            datetime.datetime(1949, 12, 31, 23, 59, 59)))
        plus_two = datetime.timezone(datetime.timedelta(hours=2))
        self.assertEqual("130504235959Z", x509_time.datetime_to_zulu(
            datetime.datetime(2013, 5, 5, 1, 59, 59, tzinfo=plus_two)))

    def test_time_encoding(self):
        t = x509_time.Time("130504235959Z")
        self.assertEqual(x509_time.UTC_TIME, t.type())
        self.assertEqual(b"\x17\x0d130504235959Z",
                         types.encode(t.to_asn1()))
        t = x509_time.Time({"str": "20500504235959Z"})
        self.assertEqual(x509_time.GENERALIZED_TIME, t.type())
        self.assertEqual(b"\x18\x0f20500504235959Z",
                         types.encode(t.to_asn1()))

    def test_time_from_datetime(self):
        t = x509_time.Time(datetime.datetime(2015, 10, 12, 12, 59, 59))
        self.assertEqual("151012125959Z", t.value())
        self.assertEqual(1444654799, t.seconds())

    def test_time_type_must_match(self):
        self.assertRaises(error.ASN1Error, x509_time.Time, "130504235959Z",
                          x509_time.GENERALIZED_TIME)
        self.assertRaises(error.ASN1Error, x509_time.Time,
                          {"str": "130504235959Z", "type": "gen"})
        self.assertRaises(error.ASN1Error, x509_time.Time, "130504235959Z",
                          "local")

    def test_invalid_time(self):
        self.assertRaises(error.ASN1Error, x509_time.Time, "131304235959Z")
        self.assertRaises(error.ASN1Error, x509_time.Time, 1234)
        self.assertRaises(error.ASN1Error, x509_time.Time, {})


if __name__ == "__main__":
    unittest.main()
