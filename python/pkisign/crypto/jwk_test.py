#!/usr/bin/env python

import hashlib
import unittest

from pkisign.crypto import error
from pkisign.crypto import jwk

# RFC 7638, section 3.1.
RSA_JWK = {
    "kty": "RSA",
    "n": "0vx7agoebGcQSuuPiLJXZptN9nndrQmbXEps2aiAFbWhM78LhWx4cbbfAAtVT86zwu1"
         "RK7aPFFxuhDR1L6tSoc_BJECPebWKRXjBZCiFV4n3oknjhMstn64tZ_2W-5JsGY4Hc5n9"
         "yBXArwl93lqt7_RN5w6Cf0h4QyQ5v-65YGjQR0_FDW2QvzqY368QQMicAtaSqzs8KJZgn"
         "Yb9c7d0zgdAZHzu6qMQvRL5hajrn1n91CbOpbISD08qNLyrdkt-bFTWhAI4vMQFh6WeZu"
         "0fM4lFd2NcRwr3XPksINHaQ-G_xBniIqbw0Ls1jF44-csFCur-kEgU8awapJzKnqDKgw",
    "e": "AQAB",
    "alg": "RS256",
    "kid": "2011-04-29",
    }


class ThumbprintTest(unittest.TestCase):
    def test_rfc7638_rsa(self):
        self.assertEqual("NzbLsXh8uDCcd-6MNwXF4W_7noWXFZAfHkxZsRGC9Xs",
                         jwk.get_thumbprint_b64u(RSA_JWK))
        self.assertEqual(32, len(jwk.get_thumbprint(RSA_JWK)))

    def test_ec(self):
        key = {"y": "b", "x": "a", "kty": "EC", "crv": "P-256", "use": "sig"}
        self.assertEqual(
            hashlib.sha256(b'{"crv":"P-256","kty":"EC","x":"a","y":"b"}')
            .digest(), jwk.get_thumbprint(key))

    def test_oct(self):
        self.assertEqual(hashlib.sha256(b'{"k":"c2VjcmV0","kty":"oct"}')
                         .digest(),
                         jwk.get_thumbprint({"kty": "oct", "k": "c2VjcmV0",
                                             "alg": "HS256"}))

    def test_optional_members_are_ignored(self):
        stripped = {"kty": "RSA", "n": RSA_JWK["n"], "e": "AQAB"}
        self.assertEqual(jwk.get_thumbprint(RSA_JWK),
                         jwk.get_thumbprint(stripped))

    def test_unsupported_key_type(self):
        self.assertRaises(error.UnsupportedAlgorithmError, jwk.get_thumbprint,
                          {"kty": "OKP", "crv": "Ed25519", "x": "a"})
        self.assertRaises(error.UnsupportedAlgorithmError, jwk.get_thumbprint,
                          {"n": "a", "e": "AQAB"})

    def test_missing_member(self):
        self.assertRaises(error.EncodingError, jwk.get_thumbprint,
                          {"kty": "RSA", "n": "a"})
        self.assertRaises(error.EncodingError, jwk.get_thumbprint,
                          {"kty": "oct", "k": 1})


if __name__ == "__main__":
    unittest.main()
