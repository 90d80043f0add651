"""
AESCBC - streaming AES-256-CBC with PKCS7 padding

Encryptor and Decryptor accept data in arbitrary chunk sizes through
write() and hand back the transformed bytes through read(). Padding is
applied/removed on close(). The copy helpers frame the stream as
[IV: 16 bytes][ciphertext] on file-like objects.

This layer provides confidentiality only: there is no MAC, so tampered
ciphertext is detected only when it happens to break the padding.
"""

from .main import aescbc
from .errors import (
    AESCBCError,
    ClosedStreamError,
    InsufficientDataError,
    InvalidIVLength,
    InvalidKeyLength,
    PaddingError,
)
from .api_streams import (
    AESCBCEngine,
    Decryptor,
    Encryptor,
    StreamState,
    decrypt_bytes,
    decrypt_stream,
    encrypt_bytes,
    encrypt_stream,
    pkcs7_pad,
    pkcs7_unpad,
)
from .version import __version__

BLOCK_SIZE = aescbc.BLOCK_SIZE
KEY_LEN = aescbc.KEY_LEN
IV_LEN = aescbc.IV_LEN

__all__ = [
    "AESCBCEngine",
    "AESCBCError",
    "BLOCK_SIZE",
    "ClosedStreamError",
    "Decryptor",
    "Encryptor",
    "IV_LEN",
    "InsufficientDataError",
    "InvalidIVLength",
    "InvalidKeyLength",
    "KEY_LEN",
    "PaddingError",
    "StreamState",
    "__version__",
    "aescbc",
    "decrypt_bytes",
    "decrypt_stream",
    "encrypt_bytes",
    "encrypt_stream",
    "pkcs7_pad",
    "pkcs7_unpad",
]
