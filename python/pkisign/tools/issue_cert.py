#!/usr/bin/env python
"""Issues an X.509 certificate signed by a CA key and prints it as PEM."""

import datetime
import json
import logging
import sys

from absl import app
from absl import flags as gflags

from pkisign.crypto import cert
from pkisign.crypto import error
from pkisign.crypto import jws
from pkisign.crypto.asn1 import x509_time

FLAGS = gflags.FLAGS

gflags.DEFINE_string("issuer", None, "Issuer DN, e.g. /C=US/O=Example CA.")
gflags.DEFINE_string("subject", None, "Subject DN, e.g. /C=US/CN=example.com.")
gflags.DEFINE_string("serial", "1", "Serial number, decimal or 0x-prefixed "
                     "hex.")
gflags.DEFINE_string("not_before", "now", "Start of validity: a Zulu time "
                     "(YYMMDDhhmmssZ or YYYYMMDDhhmmssZ), an IntDate, or "
                     "'now', 'now + 1day', ...")
gflags.DEFINE_string("not_after", "now + 1year", "End of validity, in the "
                     "same forms as --not_before.")
gflags.DEFINE_string("signature_algorithm", "SHA256withRSA",
                     "Signature algorithm, e.g. SHA256withECDSA.")
gflags.DEFINE_string("subject_public_key", None,
                     "PEM file with the subject's public key or certificate.")
gflags.DEFINE_string("ca_key", None, "PEM file with the CA private key.")
gflags.DEFINE_string("ca_key_passphrase", None,
                     "Passphrase of an encrypted --ca_key.")
gflags.DEFINE_string("extensions", None,
                     "JSON list of single-entry {name: params} objects, e.g. "
                     "'[{\"BasicConstraints\": {\"ca\": true}}]'.")
gflags.DEFINE_string("output", None, "Output file. Defaults to stdout.")

gflags.mark_flags_as_required(["issuer", "subject", "subject_public_key",
                               "ca_key"])


def _read_file(path):
    with open(path, "rb") as f:
        return f.read()


def parse_serial(serial):
    try:
        if serial.lower().startswith("0x"):
            return int(serial, 16)
        return int(serial)
    except ValueError:
        raise app.UsageError("Invalid --serial: %s" % serial)


def parse_time(value):
    """A Zulu time string from a Zulu time or an IntDate expression."""
    try:
        x509_time.time_type_of(value)
        return value
    except error.ASN1Error:
        pass
    try:
        seconds = jws.get_int_date(value)
    except error.EncodingError as e:
        raise app.UsageError("Invalid time %r: %s" % (value, e))
    return x509_time.datetime_to_zulu(
        datetime.datetime.fromtimestamp(seconds, datetime.timezone.utc))


def certificate_params():
    """The new_cert_pem() parameters described by the flags."""
    params = {
        "serial": parse_serial(FLAGS.serial),
        "sigalg": FLAGS.signature_algorithm,
        "issuer": FLAGS.issuer,
        "notbefore": parse_time(FLAGS.not_before),
        "notafter": parse_time(FLAGS.not_after),
        "subject": FLAGS.subject,
        "sbjpubkey": _read_file(FLAGS.subject_public_key),
        "cakey": _read_file(FLAGS.ca_key),
        }
    if FLAGS.ca_key_passphrase:
        params["cakey_passphrase"] = FLAGS.ca_key_passphrase
    if FLAGS.extensions:
        try:
            params["ext"] = json.loads(FLAGS.extensions)
        except ValueError as e:
            raise app.UsageError("--extensions is not valid JSON: %s" % e)
    return params


def main(argv):
    if len(argv) > 1:
        raise app.UsageError("Too many command-line arguments.")
    params = certificate_params()
    try:
        pem_cert = cert.new_cert_pem(params)
    except error.Error as e:
        raise app.UsageError("Cannot issue certificate: %s" % e)
    logging.info("Issued certificate %s for %s", params["serial"],
                 FLAGS.subject)
    if FLAGS.output:
        with open(FLAGS.output, "w") as f:
            f.write(pem_cert)
    else:
        sys.stdout.write(pem_cert)


def run():
    app.run(main)


if __name__ == "__main__":
    run()
