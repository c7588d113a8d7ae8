"""Exceptions raised by the crypto subpackage.

Callers of the verification entry points need to tell two things apart:
"this token or signature is not valid" and "this request makes no sense".
The first is an ordinary outcome of verifying untrusted input and is
reported by returning False. The second is a bug or a policy violation on
the caller's side and is reported by raising one of the exceptions below:

if not jws.verify(token, key, ["RS256"]):
    # reject the token
    return
# do more stuff on success here

while a token whose header names an algorithm outside the accepted list, or
a key of the wrong type for the algorithm, raises a PolicyError subclass
that callers should not swallow.

Encoders (DN strings, GeneralNames, extensions, TBS structures) raise an
EncodingError subclass as soon as they see input they cannot represent.
"""


class Error(Exception):
    """Exceptions raised by the crypto subpackage."""
    pass


class UnsupportedAlgorithmError(Error):
    """Raised when an algorithm is not implemented or supported."""
    pass


class EncodingError(Error):
    """Encoding/decoding error: raised when inputs cannot be serialized, or
    serialized data cannot be parsed."""
    pass


class ASN1Error(EncodingError):
    """Raised when an ASN1 object cannot be encoded, e.g. because a
    mandatory field has not been set."""
    pass


class UnknownASN1AttributeTypeError(ASN1Error):
    """Raised when a distinguished name attribute type is not known."""
    pass


class UnsupportedExtensionError(ASN1Error):
    """Raised when no encoder is registered for an extension name."""
    pass


class UnsupportedGeneralNameError(ASN1Error):
    """Raised when a GeneralName is requested with zero, several or
    unrecognized variants."""
    pass


class PolicyError(Error):
    """Raised when a request violates a stated verification policy."""
    pass


class AlgorithmMismatchError(PolicyError):
    """Raised when an explicit algorithm conflicts with the JWS header."""
    pass


class AlgorithmNotAcceptedError(PolicyError):
    """Raised when a JWS header names an algorithm outside the accepted
    list."""
    pass


class KeyTypeMismatchError(PolicyError):
    """Raised when a key cannot be used with the requested algorithm
    family."""
    pass


class MissingKeyError(PolicyError):
    """Raised when an algorithm requires a key and none was given."""
    pass


class MissingAcceptFieldError(PolicyError):
    """Raised when a mandatory JWT acceptance field is absent."""
    pass


class NotSignedError(Error):
    """Raised when the encoding of a signed structure is requested before
    it has been signed, or after its contents changed."""
    pass
