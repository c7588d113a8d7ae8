"""JSON Web Signature (RFC 7515) and JSON Web Token (RFC 7519) in compact
serialization.

    token = jws.sign("RS256", {"alg": "RS256"}, {"iss": "joe"}, private_key)
    if not jws.verify(token, public_key, ["RS256"]):
        ...

verify() and verify_jwt() return False when a token does not check out and
raise when the call itself is unsound: a malformed token header, a key of
the wrong type, or an algorithm outside the accepted list. Always pass the
accepted algorithms; without them a token chooses its own algorithm.
"""

import email.utils
import json
import logging
import re
import time

from pkisign.crypto import encoding
from pkisign.crypto import error
from pkisign.crypto import keys
from pkisign.crypto.asn1 import x509_time
from pkisign.crypto.signing import signer

NONE = "none"

# JWS "alg" -> signature or MAC algorithm name. ES512 is not supported.
JWS_ALGORITHMS = {
    "HS256": "HmacSHA256",
    "HS384": "HmacSHA384",
    "HS512": "HmacSHA512",
    "RS256": "SHA256withRSA",
    "RS384": "SHA384withRSA",
    "RS512": "SHA512withRSA",
    "ES256": "SHA256withECDSA",
    "ES384": "SHA384withECDSA",
    "PS256": "SHA256withRSAandMGF1",
    "PS384": "SHA384withRSAandMGF1",
    "PS512": "SHA512withRSAandMGF1",
    NONE: NONE,
    }

_COMPACT_RE = re.compile(r"^([^.]+)\.([^.]+)\.([^.]+)$")
_RELATIVE_DATE_RE = re.compile(r"^now\s*([+-])\s*1(hour|day|month|year)$")

_HOUR = 60 * 60
_DAY = 24 * _HOUR
_RELATIVE_SECONDS = {
    "hour": _HOUR,
    "day": _DAY,
    "month": 30 * _DAY,
    "year": 365 * _DAY,
    }


def _is_hmac(alg):
    return alg.startswith("HS")


def _is_rsa(alg):
    return alg.startswith(("RS", "PS"))


def _is_ecdsa(alg):
    return alg.startswith("ES")


def _algorithm_name(alg):
    try:
        return JWS_ALGORITHMS[alg]
    except (KeyError, TypeError):
        raise error.UnsupportedAlgorithmError(
            "Unsupported JWS algorithm: %s" % (alg,))


def _to_json(obj):
    return json.dumps(obj, separators=(",", ":"))


def read_safe_json_string(s):
    """Parses s as a JSON object.

    Returns:
        a dict, or None if s is not JSON or is JSON of another type.
    """
    try:
        obj = json.loads(s)
    except (TypeError, ValueError):
        return None
    if not isinstance(obj, dict):
        return None
    return obj


def is_safe_json_string(s):
    return read_safe_json_string(s) is not None


def _header_obj(header_b64u):
    header = read_safe_json_string(encoding.b64url_to_utf8(header_b64u))
    if header is None:
        raise error.EncodingError("JWS header is not a JSON object")
    return header


def sign(alg, header, payload, key, passphrase=None):
    """Creates a compact JWS.

    Args:
        alg: the JWS algorithm, e.g. "RS256", or None to take it from the
            header.
        header: the protected header as a dict or a JSON string.
        payload: the payload as a dict (serialized as JSON) or a string.
        key: a private key (object, PEM or DER) for RS/PS/ES; an HMAC key
            in any form signer.mac_key_bytes() accepts for HS; ignored for
            "none".
        passphrase: password of an encrypted private key.

    Returns:
        the compact serialization header.payload.signature.

    Raises:
        error.EncodingError: the header is not a JSON object, or neither
            alg nor the header names an algorithm.
        error.AlgorithmMismatchError: alg and the header "alg" differ.
        error.UnsupportedAlgorithmError: unknown algorithm.
    """
    if isinstance(header, dict):
        header_obj = dict(header)
        header_str = None
    else:
        header_obj = read_safe_json_string(header)
        if header_obj is None:
            raise error.EncodingError("JWS header is not a JSON object: %r" %
                                      (header,))
        header_str = header

    if alg is None:
        alg = header_obj.get("alg")
        if alg is None:
            raise error.EncodingError("No algorithm in argument or header")
    elif "alg" not in header_obj:
        header_obj["alg"] = alg
        header_str = None
    elif header_obj["alg"] != alg:
        raise error.AlgorithmMismatchError(
            "Algorithm %s conflicts with header alg %s" %
            (alg, header_obj["alg"]))

    if header_str is None:
        header_str = _to_json(header_obj)
    if isinstance(payload, dict):
        payload = _to_json(payload)

    alg_name = _algorithm_name(alg)
    signing_input = "%s.%s" % (encoding.b64url_encode(header_str),
                               encoding.b64url_encode(payload))

    if alg == NONE:
        signature = b""
    elif _is_hmac(alg):
        signature = signer.Mac(alg_name, key).update(signing_input).finish()
    else:
        key = keys.get_key(key, passphrase)
        sig = signer.Signature(alg_name)
        sig.init(key)
        sig.update(signing_input)
        signature = sig.sign()
        if _is_ecdsa(alg):
            signature = signer.ecdsa_der_to_concat(signature, key)
    return "%s.%s" % (signing_input, encoding.b64url_encode(signature))


def verify(jws, key, accept_algs=None):
    """Verifies the signature of a compact JWS.

    Args:
        jws: the compact serialization.
        key: for RS/PS/ES a public key object, PEM string or certificate;
            for HS the shared key.
        accept_algs: the algorithms the caller accepts, e.g. ["RS256"].

    Returns:
        True if the signature verifies, False if it does not, or if the
        token is not in three-segment form.

    Raises:
        error.EncodingError: the header is not a JSON object, or lacks
            "alg".
        error.AlgorithmNotAcceptedError: the header alg is not accepted.
        error.UnsupportedAlgorithmError: unknown algorithm, or "none".
        error.MissingKeyError: no key was given.
        error.KeyTypeMismatchError: the key does not fit the algorithm.
    """
    if accept_algs is None:
        logging.warning("JWS verified without a list of accepted "
                        "algorithms")
    elif isinstance(accept_algs, str):
        accept_algs = [accept_algs]

    segments = jws.split(".")
    if len(segments) != 3:
        logging.debug("Rejecting JWS with %d segments", len(segments))
        return False

    alg = _header_obj(segments[0]).get("alg")
    if alg is None:
        raise error.EncodingError("JWS header has no alg")
    if accept_algs and alg not in accept_algs:
        raise error.AlgorithmNotAcceptedError(
            "JWS algorithm %s is not one of %s" % (alg, accept_algs))
    alg_name = _algorithm_name(alg)
    if alg == NONE:
        raise error.UnsupportedAlgorithmError(
            "Unsigned JWS (alg none) cannot be verified")
    if key is None:
        raise error.MissingKeyError("Algorithm %s needs a key" % alg)

    signing_input = "%s.%s" % (segments[0], segments[1])
    try:
        signature = encoding.b64url_decode(segments[2])
    except error.EncodingError as e:
        logging.debug("Rejecting JWS with undecodable signature: %s", e)
        return False

    if _is_hmac(alg):
        return signer.Mac(alg_name, key).update(signing_input).verify(
            signature)

    key = keys.get_key(key)
    if _is_rsa(alg) and not keys.is_rsa_key(key):
        raise error.KeyTypeMismatchError("%s needs an RSA key" % alg)
    if _is_ecdsa(alg):
        if not keys.is_ec_key(key):
            raise error.KeyTypeMismatchError("%s needs an EC key" % alg)
        try:
            signature = signer.ecdsa_concat_to_der(signature, key)
        except error.EncodingError as e:
            logging.warning("Cannot convert ECDSA signature: %s", e)
            return False

    sig = signer.Signature(alg_name)
    sig.init(key)
    sig.update(signing_input)
    return sig.verify(signature)


def _as_list(value):
    if isinstance(value, str):
        return [value]
    return list(value)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def verify_jwt(jwt, key, accept_field):
    """Verifies a JWT: its claims, then its signature.

    Args:
        jwt: the compact serialization.
        key: as for verify().
        accept_field: a dict with
            alg: accepted algorithms (mandatory).
            iss, sub, aud: accepted issuers, subjects, audiences.
            verify_at: IntDate to check the time claims at (default now).
            grace_period: clock skew allowance in seconds (default 0).
            jti: the expected JWT ID.

    Returns:
        True only if every applicable check passes.

    Raises:
        error.EncodingError: not a three-segment token, or the header or
            payload is not a JSON object.
        error.MissingAcceptFieldError: accept_field has no "alg".
        Any exception verify() raises.
    """
    segments = jwt.split(".")
    if len(segments) != 3:
        raise error.EncodingError("JWT is not of the form "
                                  "header.payload.signature")
    header = _header_obj(segments[0])
    payload = read_safe_json_string(encoding.b64url_to_utf8(segments[1]))
    if payload is None:
        raise error.EncodingError("JWT payload is not a JSON object")

    if header.get("alg") is None:
        logging.debug("Rejecting JWT without alg")
        return False
    if accept_field.get("alg") is None:
        raise error.MissingAcceptFieldError("accept_field needs alg")
    accept_algs = _as_list(accept_field["alg"])
    if header["alg"] not in accept_algs:
        logging.debug("Rejecting JWT: alg %s not accepted", header["alg"])
        return False

    for claim in ("iss", "sub"):
        if claim in payload and accept_field.get(claim) is not None:
            if payload[claim] not in _as_list(accept_field[claim]):
                logging.debug("Rejecting JWT: %s %s not accepted", claim,
                              payload[claim])
                return False

    if "aud" in payload and accept_field.get("aud") is not None:
        accept_aud = _as_list(accept_field["aud"])
        aud = payload["aud"]
        if isinstance(aud, str):
            aud = [aud]
        if not isinstance(aud, list):
            logging.debug("Rejecting JWT: aud is a %s", type(aud).__name__)
            return False
        if not all(a in accept_aud for a in aud):
            logging.debug("Rejecting JWT: aud %s not accepted", aud)
            return False

    now = accept_field.get("verify_at")
    if not _is_number(now):
        now = get_now()
    grace = accept_field.get("grace_period")
    if not _is_number(grace):
        grace = 0

    exp = payload.get("exp")
    if _is_number(exp) and exp + grace < now:
        logging.debug("Rejecting JWT: expired at %s", exp)
        return False
    nbf = payload.get("nbf")
    if _is_number(nbf) and now < nbf - grace:
        logging.debug("Rejecting JWT: not valid before %s", nbf)
        return False
    iat = payload.get("iat")
    if _is_number(iat) and now < iat - grace:
        logging.debug("Rejecting JWT: issued in the future at %s", iat)
        return False

    if "jti" in payload and "jti" in accept_field:
        if payload["jti"] != accept_field["jti"]:
            logging.debug("Rejecting JWT: jti mismatch")
            return False

    return verify(jwt, key, accept_algs)


def parse(jws):
    """Decodes a compact JWS (or an unsigned header.payload) for display.

    Returns:
        a dict with header_obj, payload_obj (None unless the payload is a
        JSON object), payload, header_pp, payload_pp and, for three
        segments, sig_hex.

    Raises:
        error.EncodingError: wrong number of segments, or bad base64url.
    """
    segments = jws.split(".")
    if len(segments) not in (2, 3):
        raise error.EncodingError("Malformed JWS: %d segments" %
                                  len(segments))
    header_obj = read_safe_json_string(encoding.b64url_to_utf8(segments[0]))
    payload = encoding.b64url_to_utf8(segments[1])
    payload_obj = read_safe_json_string(payload)
    result = {
        "header_obj": header_obj,
        "payload_obj": payload_obj,
        "payload": payload,
        "header_pp": json.dumps(header_obj, indent=2),
        "payload_pp": (payload if payload_obj is None
                       else json.dumps(payload_obj, indent=2)),
        }
    if len(segments) == 3:
        result["sig_hex"] = encoding.b64url_to_hex(segments[2])
    return result


def get_encoded_signature_value_from_jws(jws):
    """The base64url signature segment of a compact JWS.

    Raises:
        error.EncodingError: not of the form header.payload.signature.
    """
    match = _COMPACT_RE.match(jws)
    if not match:
        raise error.EncodingError("JWS is not of the form "
                                  "header.payload.signature")
    return match.group(3)


class JWS(object):
    """Parses a compact JWS once and keeps the pieces.

    The first successful parse_jws() is cached: later calls return at once,
    unless the signature value is needed and was skipped before.
    """

    def __init__(self):
        self.header_b64u = None
        self.payload_b64u = None
        self.sig_b64u = None
        self.signing_input = None
        self.sig_hex = None
        self.header = None
        self.payload = None
        self.parsed_header = None
        self.parsed_payload = None

    def parse_jws(self, jws, sig_val_not_needed=False):
        """Splits and decodes a compact JWS into the attributes.

        Raises:
            error.EncodingError: not of the form header.payload.signature,
                or the header is not a JSON object.
        """
        if self.signing_input is not None and (sig_val_not_needed or
                                                self.sig_hex is not None):
            return
        match = _COMPACT_RE.match(jws)
        if not match:
            raise error.EncodingError("JWS is not of the form "
                                      "header.payload.signature")
        header_b64u, payload_b64u, sig_b64u = match.groups()
        sig_hex = None
        if not sig_val_not_needed:
            sig_hex = encoding.b64url_to_hex(sig_b64u)
        header = encoding.b64url_to_utf8(header_b64u)
        payload = encoding.b64url_to_utf8(payload_b64u)
        parsed_header = read_safe_json_string(header)
        if parsed_header is None:
            raise error.EncodingError("Malformed JSON in JWS header: %s" %
                                      header)

        self.header_b64u = header_b64u
        self.payload_b64u = payload_b64u
        self.sig_b64u = sig_b64u
        self.signing_input = "%s.%s" % (header_b64u, payload_b64u)
        self.sig_hex = sig_hex
        self.header = header
        self.payload = payload
        self.parsed_header = parsed_header
        self.parsed_payload = read_safe_json_string(payload)


def get_now():
    """The current time as an IntDate (seconds since the epoch)."""
    return int(time.time())


def get_zulu_int(zulu):
    """IntDate of "YYYYMMDDhhmmssZ" or "YYMMDDhhmmssZ"."""
    return x509_time.zulu_to_seconds(zulu)


def get_int_date(value):
    """Reads an IntDate.

    Args:
        value: an int; "now"; "now + 1hour", "now - 1day", ... with units
            hour, day, month (30 days) and year (365 days); a Zulu time
            string; or a string of digits.

    Raises:
        error.EncodingError: unsupported format.
    """
    if _is_number(value):
        return int(value)
    if not isinstance(value, str):
        raise error.EncodingError("Unsupported IntDate: %r" % (value,))
    if value == "now":
        return get_now()
    match = _RELATIVE_DATE_RE.match(value)
    if match:
        offset = _RELATIVE_SECONDS[match.group(2)]
        if match.group(1) == "-":
            offset = -offset
        return get_now() + offset
    if value.endswith("Z"):
        return get_zulu_int(value)
    if value.isdigit():
        return int(value)
    raise error.EncodingError("Unsupported IntDate: %s" % value)


def int_date_to_utc_string(int_date):
    """E.g. "Mon, 12 Oct 2015 12:59:59 GMT"."""
    return email.utils.formatdate(int_date, usegmt=True)


def int_date_to_zulu(int_date):
    """E.g. "20151012125959Z"."""
    return x509_time.seconds_to_zulu(int_date, x509_time.GENERALIZED_TIME)
