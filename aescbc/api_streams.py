"""Stream and byte-level convenience wrappers."""

from .main import aescbc


Encryptor = aescbc.Encryptor
Decryptor = aescbc.Decryptor
AESCBCEngine = aescbc.AESCBCEngine
StreamState = aescbc.StreamState


def pkcs7_pad(data, block_size: int = aescbc.BLOCK_SIZE) -> bytes:
    return aescbc.pkcs7_pad(data, block_size)


def pkcs7_unpad(data, block_size: int = aescbc.BLOCK_SIZE) -> bytes:
    return aescbc.pkcs7_unpad(data, block_size)


def encrypt_stream(
    source,
    dest,
    key=None,
    iv=None,
    *,
    chunk_size: int | None = None,
):
    return aescbc.encrypt_stream(source, dest, key, iv, chunk_size=chunk_size)


def decrypt_stream(
    source,
    dest,
    key,
    *,
    chunk_size: int | None = None,
):
    return aescbc.decrypt_stream(source, dest, key, chunk_size=chunk_size)


def encrypt_bytes(plaintext, key=None, iv=None):
    return aescbc.encrypt_bytes(plaintext, key, iv)


def decrypt_bytes(blob, key):
    return aescbc.decrypt_bytes(blob, key)


__all__ = [
    "AESCBCEngine",
    "Decryptor",
    "Encryptor",
    "StreamState",
    "decrypt_bytes",
    "decrypt_stream",
    "encrypt_bytes",
    "encrypt_stream",
    "pkcs7_pad",
    "pkcs7_unpad",
]
