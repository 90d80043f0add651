"""Exception types raised by the aescbc streams."""


class AESCBCError(ValueError):
    """Base class for every error raised by aescbc."""


class InvalidKeyLength(AESCBCError):
    pass


class InvalidIVLength(AESCBCError):
    pass


class ClosedStreamError(AESCBCError):
    """Write attempted on a stream that has already been closed."""


class PaddingError(AESCBCError):
    """Malformed PKCS7 padding: tampering, truncation, or wrong key/IV."""


class InsufficientDataError(AESCBCError):
    """The ciphertext stream ended before a complete final block."""


__all__ = [
    "AESCBCError",
    "ClosedStreamError",
    "InsufficientDataError",
    "InvalidIVLength",
    "InvalidKeyLength",
    "PaddingError",
]
