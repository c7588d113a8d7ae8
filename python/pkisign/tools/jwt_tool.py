#!/usr/bin/env python
"""Signs or verifies a JSON Web Token.

Sign:
  jwt_tool --mode=sign --alg=RS256 --key=key.pem --payload='{"iss":"joe"}'
Verify:
  jwt_tool --mode=verify --accept_alg=RS256 --key=pub.pem --token=eyJ...
"""

import json
import logging

from absl import app
from absl import flags as gflags

from pkisign.crypto import error
from pkisign.crypto import jws

FLAGS = gflags.FLAGS

gflags.DEFINE_enum("mode", "sign", ["sign", "verify"], "What to do.")
gflags.DEFINE_string("alg", None, "JWS algorithm for signing, e.g. HS256. "
                     "Defaults to the alg of --header.")
gflags.DEFINE_string("header", '{"typ":"JWT"}', "JWS header (JSON).")
gflags.DEFINE_string("payload", None, "Payload to sign (JSON or text).")
gflags.DEFINE_string("key", None, "PEM key file for RS/PS/ES algorithms; "
                     "for HS algorithms the shared key itself (hex or text).")
gflags.DEFINE_string("key_passphrase", None,
                     "Passphrase of an encrypted private key.")
gflags.DEFINE_list("accept_alg", None, "Algorithms accepted when verifying.")
gflags.DEFINE_string("token", None, "Token to verify.")
gflags.DEFINE_string("verify_at", "now", "Time to check the claims at, as an "
                     "IntDate, a Zulu time, or 'now'.")
gflags.DEFINE_integer("grace_period", 0, "Allowed clock skew in seconds.")


def _is_hmac(alg):
    return alg is not None and alg.startswith("HS")


def load_key(alg):
    """The --key for alg: file contents, or the flag value for HMAC."""
    if FLAGS.key is None or alg == jws.NONE:
        return None
    if _is_hmac(alg):
        return FLAGS.key
    with open(FLAGS.key, "rb") as f:
        return f.read()


def sign_token():
    if FLAGS.payload is None:
        raise app.UsageError("--payload is required to sign.")
    alg = FLAGS.alg
    if alg is None:
        header = jws.read_safe_json_string(FLAGS.header)
        alg = header.get("alg") if header else None
    token = jws.sign(FLAGS.alg, FLAGS.header, FLAGS.payload, load_key(alg),
                     FLAGS.key_passphrase)
    logging.info("Signed token with %s", alg)
    return token


def verify_token():
    """Verifies --token; checks JWT claims when the payload is JSON."""
    if FLAGS.token is None:
        raise app.UsageError("--token is required to verify.")
    if not FLAGS.accept_alg:
        raise app.UsageError("--accept_alg is required to verify.")
    # A single accepted HMAC algorithm decides how --key is read.
    key = load_key(FLAGS.accept_alg[0])
    parsed = jws.parse(FLAGS.token)
    if parsed["payload_obj"] is None:
        return jws.verify(FLAGS.token, key, FLAGS.accept_alg)
    accept_field = {
        "alg": FLAGS.accept_alg,
        "verify_at": jws.get_int_date(FLAGS.verify_at),
        "grace_period": FLAGS.grace_period,
        }
    return jws.verify_jwt(FLAGS.token, key, accept_field)


def main(argv):
    if len(argv) > 1:
        raise app.UsageError("Too many command-line arguments.")
    try:
        if FLAGS.mode == "sign":
            print(sign_token())
            return 0
        valid = verify_token()
    except error.Error as e:
        raise app.UsageError("%s: %s" % (e.__class__.__name__, e))
    print("valid" if valid else "invalid")
    if valid:
        parsed = jws.parse(FLAGS.token)
        logging.info("Header: %s", json.dumps(parsed["header_obj"]))
    return 0 if valid else 1


def run():
    app.run(main)


if __name__ == "__main__":
    run()
