"""ASN.1 UTCTime and GeneralizedTime, as understood by RFC 5280."""

import calendar
import datetime
import re
import time

from pyasn1 import error as pyasn1_error
from pyasn1.type import useful

from pkisign.crypto import error

UTC_TIME = "utc"
GENERALIZED_TIME = "gen"

# YYMMDDHHMMSSZ
_UTC_TIME_RE = re.compile(r"^[0-9]{12}Z$")
# YYYYMMDDHHMMSSZ
_GENERALIZED_TIME_RE = re.compile(r"^[0-9]{14}Z$")

_PATTERNS = {
    UTC_TIME: _UTC_TIME_RE,
    GENERALIZED_TIME: _GENERALIZED_TIME_RE,
    }


def time_type_of(zulu):
    """UTC_TIME for 12 digits + Z, GENERALIZED_TIME for 14 digits + Z.

    Raises:
        error.ASN1Error: the string is neither.
    """
    if _UTC_TIME_RE.match(zulu):
        return UTC_TIME
    if _GENERALIZED_TIME_RE.match(zulu):
        return GENERALIZED_TIME
    raise error.ASN1Error("Invalid time representation: %s" % zulu)


def zulu_to_struct_time(zulu):
    """Parses YYMMDDHHMMSSZ or YYYYMMDDHHMMSSZ.

    Returns:
        a time.struct_time in UTC.
    Raises:
        error.ASN1Error: the string does not represent a valid time.
    """
    time_type = time_type_of(zulu)
    digits = zulu[:-1]
    if time_type == UTC_TIME:
        # From RFC 5280:
        # Where YY is greater than or equal to 50, the year SHALL be
        # interpreted as 19YY; and
        #
        # Where YY is less than 50, the year SHALL be interpreted as 20YY.
        century = "20" if int(digits[:2]) < 50 else "19"
        digits = century + digits
    try:
        # Adding GMT clears the daylight saving flag.
        return time.strptime(digits + "GMT", "%Y%m%d%H%M%S%Z")
    except ValueError:
        raise error.ASN1Error("Invalid time representation: %s" % zulu)


def zulu_to_seconds(zulu):
    """Seconds since the epoch for a Zulu time string."""
    return calendar.timegm(zulu_to_struct_time(zulu))


def seconds_to_zulu(seconds, time_type=GENERALIZED_TIME):
    """Formats seconds since the epoch as a Zulu time string."""
    fmt = "%y%m%d%H%M%SZ" if time_type == UTC_TIME else "%Y%m%d%H%M%SZ"
    return time.strftime(fmt, time.gmtime(seconds))


def datetime_to_zulu(value):
    """Formats a datetime the way RFC 5280 wants it in a certificate.

    Dates in 1950-2049 are UTCTime, all others GeneralizedTime. Naive
    datetimes are taken to be in UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    if 1950 <= value.year < 2050:
        return value.strftime("%y%m%d%H%M%SZ")
    return "%04d%s" % (value.year, value.strftime("%m%d%H%M%SZ"))


class Time(object):
    """A certificate or CRL time: UTCTime or GeneralizedTime."""

    def __init__(self, value, time_type=None):
        """Initialize a time.

        Args:
            value: a Zulu string ("130504235959Z" or "20130504235959Z"),
                a datetime, or a {"str": zulu, "type": time_type} dict.
            time_type: UTC_TIME or GENERALIZED_TIME. Defaults to the type
                implied by the string length.

        Raises:
            error.ASN1Error: the value is not a valid time of that type.
        """
        if isinstance(value, dict):
            time_type = value.get("type", time_type)
            value = value.get("str")
        if isinstance(value, datetime.datetime):
            value = datetime_to_zulu(value)
        if not isinstance(value, str):
            raise error.ASN1Error("Invalid time parameter: %r" % (value,))
        if time_type is None:
            time_type = time_type_of(value)
        elif time_type not in _PATTERNS:
            raise error.ASN1Error("Unknown time type: %s" % time_type)
        elif not _PATTERNS[time_type].match(value):
            raise error.ASN1Error("Invalid %s time representation: %s" %
                                  (time_type, value))
        # Reject impossible dates such as month 13 early.
        zulu_to_struct_time(value)
        self._value = value
        self._type = time_type

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self._value,
                               self._type)

    def value(self):
        return self._value

    def type(self):
        return self._type

    def to_asn1(self):
        try:
            if self._type == UTC_TIME:
                return useful.UTCTime(self._value)
            return useful.GeneralizedTime(self._value)
        except pyasn1_error.PyAsn1Error as e:
            raise error.ASN1Error("Invalid time %s: %s" % (self._value, e))

    def seconds(self):
        return zulu_to_seconds(self._value)
