# AESCBC STREAM ENGINE ->

import os as _os_module
import sys as _sys_module

from .errors import (
    AESCBCError as _AESCBCError,
    ClosedStreamError as _ClosedStreamError,
    InsufficientDataError as _InsufficientDataError,
    InvalidIVLength as _InvalidIVLength,
    InvalidKeyLength as _InvalidKeyLength,
    PaddingError as _PaddingError,
)


class aescbc:
    import enum
    import os
    import typing
    from cryptography.hazmat.primitives import padding
    from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

    AESCBCError = _AESCBCError
    ClosedStreamError = _ClosedStreamError
    InsufficientDataError = _InsufficientDataError
    InvalidIVLength = _InvalidIVLength
    InvalidKeyLength = _InvalidKeyLength
    PaddingError = _PaddingError

    ENGINE_VERSION = "1.2.0"
    BLOCK_SIZE = 16
    KEY_LEN = 32  # AES-256
    IV_LEN = 16
    DEFAULT_COPY_BUFFER_SIZE = 5 * 1024 * 1024
    COPY_BUFFER_SIZE_ENV = "AESCBC_COPY_BUFFER_SIZE"
    VERBOSE_ENV = "AESCBC_VERBOSE"
    QUEUE_COMPACT_MIN = 64 * 1024

    class StreamState(enum.Enum):
        OPEN = "open"
        CLOSED = "closed"

    @staticmethod
    def _env_int(name: str) -> "aescbc.typing.Optional[int]":
        value = _os_module.getenv(name)
        if not value:
            return None
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return None
        if parsed <= 0:
            return None
        return parsed

    @staticmethod
    def _verbose_enabled() -> bool:
        raw = _os_module.getenv(aescbc.VERBOSE_ENV, "").strip().lower()
        return raw in {"1", "true", "yes", "on"}

    @staticmethod
    def _log(message: str) -> None:
        if not aescbc._verbose_enabled():
            return
        print(f"[aescbc] {message}", file=_sys_module.stderr)

    @staticmethod
    def _resolve_copy_buffer_size(value: "int | None") -> int:
        if value is None:
            return aescbc._env_int(aescbc.COPY_BUFFER_SIZE_ENV) or aescbc.DEFAULT_COPY_BUFFER_SIZE
        size = int(value)
        if size <= 0:
            raise ValueError("copy buffer size must be positive")
        return size

    @staticmethod
    def _coerce_bytes(data, label: str) -> bytes:
        if isinstance(data, str):
            raise TypeError(f"{label} must be bytes-like, not str")
        return memoryview(data).tobytes()

    @staticmethod
    def _check_key(key) -> bytes:
        key = aescbc._coerce_bytes(key, "key")
        if len(key) != aescbc.KEY_LEN:
            raise aescbc.InvalidKeyLength(f"AES key must be {aescbc.KEY_LEN} bytes long, got {len(key)}")
        return key

    @staticmethod
    def _check_iv(iv) -> bytes:
        iv = aescbc._coerce_bytes(iv, "iv")
        if len(iv) != aescbc.IV_LEN:
            raise aescbc.InvalidIVLength(f"IV must be {aescbc.IV_LEN} bytes long, got {len(iv)}")
        return iv

    # ------------------------------------------------------------------
    # PKCS7 padding
    # ------------------------------------------------------------------

    @staticmethod
    def pkcs7_pad(data, block_size: int = BLOCK_SIZE) -> bytes:
        """
        Pad ``data`` up to the next multiple of ``block_size``.

        Appends ``n`` bytes of value ``n`` where ``n`` is in ``[1, block_size]``.
        Block-aligned input receives a whole extra block, so the padding can
        always be recognised and removed.
        """
        if not 0 < block_size < 256:
            raise ValueError("block_size must be between 1 and 255")
        data = aescbc._coerce_bytes(data, "data")
        padder = aescbc.padding.PKCS7(block_size * 8).padder()
        return padder.update(data) + padder.finalize()

    @staticmethod
    def pkcs7_unpad(data, block_size: int = BLOCK_SIZE) -> bytes:
        """
        Strip PKCS7 padding added by :meth:`pkcs7_pad`.

        Empty input comes back empty. Input that is not block aligned, a count
        of zero or above ``block_size``, or any trailing byte that disagrees
        with the count raises ``PaddingError``.
        """
        if not 0 < block_size < 256:
            raise ValueError("block_size must be between 1 and 255")
        data = aescbc._coerce_bytes(data, "data")
        if not data:
            return b""
        unpadder = aescbc.padding.PKCS7(block_size * 8).unpadder()
        try:
            return unpadder.update(data) + unpadder.finalize()
        except ValueError as exc:
            raise aescbc.PaddingError("invalid PKCS7 padding") from exc

    # ------------------------------------------------------------------
    # Block transform
    # ------------------------------------------------------------------

    class AESCBCEngine:
        """AES-CBC over whole blocks; the chaining value carries across calls."""

        def __init__(self, key: bytes, iv: bytes) -> None:
            self._cipher = aescbc.Cipher(aescbc.algorithms.AES(bytes(key)), aescbc.modes.CBC(bytes(iv)))
            self._encryptor = None
            self._decryptor = None

        @staticmethod
        def _require_aligned(data: bytes) -> None:
            if len(data) % aescbc.BLOCK_SIZE:
                raise ValueError(f"input must be a multiple of {aescbc.BLOCK_SIZE} bytes, got {len(data)}")

        def encrypt_blocks(self, data: bytes) -> bytes:
            self._require_aligned(data)
            if self._encryptor is None:
                self._encryptor = self._cipher.encryptor()
            return self._encryptor.update(data)

        def decrypt_blocks(self, data: bytes) -> bytes:
            self._require_aligned(data)
            if self._decryptor is None:
                self._decryptor = self._cipher.decryptor()
            return self._decryptor.update(data)

    class _ByteQueue:
        """FIFO byte buffer with a read cursor; consumed space is reclaimed lazily."""

        __slots__ = ("_data", "_start")

        def __init__(self) -> None:
            self._data = bytearray()
            self._start = 0

        def __len__(self) -> int:
            return len(self._data) - self._start

        def extend(self, chunk: bytes) -> None:
            if chunk:
                self._data += chunk

        def take(self, size: int) -> bytes:
            size = max(0, min(size, len(self)))
            out = bytes(self._data[self._start:self._start + size])
            self._advance(size)
            return out

        def copy_into(self, buffer, limit: int) -> int:
            view = memoryview(buffer).cast("B")
            size = max(0, min(len(view), limit, len(self)))
            if size:
                view[:size] = self._data[self._start:self._start + size]
                self._advance(size)
            return size

        def tail(self, size: int) -> bytes:
            size = min(size, len(self))
            return bytes(self._data[len(self._data) - size:])

        def drop_tail(self, size: int) -> None:
            size = min(size, len(self))
            if size:
                del self._data[len(self._data) - size:]

        def _advance(self, size: int) -> None:
            self._start += size
            if self._start == len(self._data):
                self._data.clear()
                self._start = 0
            elif self._start >= aescbc.QUEUE_COMPACT_MIN and self._start * 2 >= len(self._data):
                del self._data[:self._start]
                self._start = 0

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    class _CBCStream:
        """Shared buffering, state and copy plumbing for both directions."""

        _direction = "stream"

        def __init__(self, key, iv, *, engine_factory=None, copy_buffer_size: "int | None" = None) -> None:
            self._key = aescbc._check_key(key)
            self._iv = aescbc._check_iv(iv)
            self._engine_factory = engine_factory or aescbc.AESCBCEngine
            self._engine = self._engine_factory(self._key, self._iv)
            self.copy_buffer_size = aescbc._resolve_copy_buffer_size(copy_buffer_size)
            self._input = bytearray()
            self._output = aescbc._ByteQueue()
            self._state = aescbc.StreamState.OPEN

        @property
        def key(self) -> bytes:
            return self._key

        @property
        def iv(self) -> bytes:
            return self._iv

        @property
        def state(self) -> "aescbc.StreamState":
            return self._state

        @property
        def closed(self) -> bool:
            return self._state is aescbc.StreamState.CLOSED

        @property
        def bytes_available(self) -> int:
            return len(self._output)

        @property
        def eof(self) -> bool:
            """True once the stream is closed and every output byte has been read."""
            return self.closed and len(self._output) == 0

        def _ensure_open(self) -> None:
            if self.closed:
                raise aescbc.ClosedStreamError(f"write to closed {self._direction}")

        def readinto(self, buffer) -> int:
            """Copy queued output into ``buffer``; 0 means nothing is ready yet (or eof)."""
            return self._output.copy_into(buffer, self.bytes_available)

        def read(self, size: int = -1) -> bytes:
            available = self.bytes_available
            if size is None or size < 0 or size > available:
                size = available
            return self._output.take(size)

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb) -> None:
            if exc_type is None:
                self.close()

        def _pump(self, dst, src) -> int:
            """Feed ``src`` through the stream into ``dst`` until exhausted, then close and drain."""
            size = self.copy_buffer_size
            written = 0
            readinto = getattr(src, "readinto", None)
            if callable(readinto):
                buf = bytearray(size)
                view = memoryview(buf)
                while True:
                    count = readinto(view)
                    if count is None:
                        # non-blocking source with nothing ready yet
                        continue
                    if count == 0:
                        break
                    self.write(view[:count])
                    written += self._drain(dst)
            else:
                while True:
                    chunk = src.read(size)
                    if chunk is None:
                        continue
                    if not chunk:
                        break
                    self.write(chunk)
                    written += self._drain(dst)
            self.close()
            written += self._drain(dst)
            flush = getattr(dst, "flush", None)
            if callable(flush):
                flush()
            return written

        def _drain(self, dst) -> int:
            written = 0
            while True:
                chunk = self.read(self.copy_buffer_size)
                if not chunk:
                    return written
                dst.write(chunk)
                written += len(chunk)

    class Encryptor(_CBCStream):
        """
        Push-style AES-256-CBC encryptor.

        Plaintext goes in through ``write()`` and ciphertext comes out through
        ``read()``/``readinto()``. The final block of plaintext (full or partial)
        is always held back until ``close()``, which pads it with PKCS7 and
        queues its ciphertext. At least one ``read()`` after ``close()`` is
        needed to collect everything.

        Key and IV default to fresh random values; copy ``key`` and ``iv`` so
        the decrypting side can be given the same ones.
        """

        _direction = "encryptor"

        def __init__(
            self,
            key=None,
            iv=None,
            *,
            engine_factory=None,
            copy_buffer_size: "int | None" = None,
            random_bytes=None
        ) -> None:
            rand = random_bytes or aescbc.os.urandom
            super().__init__(
                rand(aescbc.KEY_LEN) if key is None else key,
                rand(aescbc.IV_LEN) if iv is None else iv,
                engine_factory=engine_factory,
                copy_buffer_size=copy_buffer_size,
            )

        def write(self, data) -> int:
            self._ensure_open()
            chunk = aescbc._coerce_bytes(data, "data")
            if not chunk:
                return 0
            self._input += chunk
            # one block (possibly partial) always stays behind for padding
            keep = len(self._input) % aescbc.BLOCK_SIZE or aescbc.BLOCK_SIZE
            ready = len(self._input) - keep
            if ready:
                self._output.extend(self._engine.encrypt_blocks(bytes(self._input[:ready])))
                del self._input[:ready]
            return len(chunk)

        def close(self) -> bool:
            """Pad and encrypt the retained block. Returns False if already closed."""
            if self.closed:
                return False
            final = aescbc.pkcs7_pad(self._input, aescbc.BLOCK_SIZE)
            self._output.extend(self._engine.encrypt_blocks(final))
            self._input.clear()
            self._state = aescbc.StreamState.CLOSED
            return True

        def copy(self, dst, src) -> int:
            """
            Encrypt everything readable from ``src`` into ``dst``.

            The IV is written first so the decryptor can recover it. Returns
            the number of bytes written to ``dst``, IV included.
            """
            aescbc._log(f"encrypt copy start buffer={self.copy_buffer_size}")
            dst.write(self._iv)
            written = len(self._iv) + self._pump(dst, src)
            aescbc._log(f"encrypt copy done written={written}")
            return written

    class Decryptor(_CBCStream):
        """
        Push-style AES-256-CBC decryptor.

        Ciphertext goes in through ``write()``; plaintext comes out through
        ``read()``. The last 16 bytes of plaintext are withheld until
        ``close()`` strips the PKCS7 padding from them.
        """

        _direction = "decryptor"

        def __init__(
            self,
            key,
            iv,
            *,
            engine_factory=None,
            copy_buffer_size: "int | None" = None
        ) -> None:
            super().__init__(key, iv, engine_factory=engine_factory, copy_buffer_size=copy_buffer_size)
            self._touched = False

        @property
        def bytes_available(self) -> int:
            if self.closed:
                return len(self._output)
            return max(0, len(self._output) - aescbc.BLOCK_SIZE)

        def write(self, data) -> int:
            self._ensure_open()
            chunk = aescbc._coerce_bytes(data, "data")
            if not chunk:
                return 0
            self._touched = True
            self._input += chunk
            ready = len(self._input) - len(self._input) % aescbc.BLOCK_SIZE
            if ready:
                self._output.extend(self._engine.decrypt_blocks(bytes(self._input[:ready])))
                del self._input[:ready]
            return len(chunk)

        def close(self) -> bool:
            """
            Strip padding from the withheld tail and release it to ``read()``.

            Returns False if already closed. Raises ``InsufficientDataError``
            when the ciphertext was truncated and ``PaddingError`` when the
            padding is malformed; the stream stays open in both cases.
            """
            if self.closed:
                return False
            if self._input:
                aescbc._log(f"decrypt close rejected: {len(self._input)} unaligned trailing bytes")
                raise aescbc.InsufficientDataError(
                    f"ciphertext is not block aligned ({len(self._input)} trailing bytes)"
                )
            if len(self._output) < aescbc.BLOCK_SIZE:
                aescbc._log(f"decrypt close rejected: only {len(self._output)} bytes buffered")
                raise aescbc.InsufficientDataError("not enough bytes buffered to strip PKCS7 padding")
            tail = self._output.tail(aescbc.BLOCK_SIZE)
            try:
                stripped = aescbc.pkcs7_unpad(tail, aescbc.BLOCK_SIZE)
            except aescbc.PaddingError:
                aescbc._log("decrypt close rejected: malformed PKCS7 padding")
                raise
            self._output.drop_tail(len(tail) - len(stripped))
            self._state = aescbc.StreamState.CLOSED
            return True

        def _replace_iv(self, iv) -> None:
            if self._touched:
                raise RuntimeError("IV cannot be replaced after ciphertext has been written")
            self._iv = aescbc._check_iv(iv)
            self._engine = self._engine_factory(self._key, self._iv)

        def copy(self, dst, src) -> int:
            """
            Decrypt an ``[IV][ciphertext]`` stream from ``src`` into ``dst``.

            The IV given at construction is replaced by the first 16 bytes of
            ``src``. Returns the number of plaintext bytes written.
            """
            self._replace_iv(aescbc._read_exact(src, aescbc.IV_LEN))
            aescbc._log(f"decrypt copy start buffer={self.copy_buffer_size}")
            written = self._pump(dst, src)
            aescbc._log(f"decrypt copy done written={written}")
            return written

    # ------------------------------------------------------------------
    # Convenience entry points
    # ------------------------------------------------------------------

    @staticmethod
    def _read_exact(src, size: int) -> bytes:
        buf = bytearray()
        while len(buf) < size:
            chunk = src.read(size - len(buf))
            if chunk is None:
                continue
            if not chunk:
                break
            buf += chunk
        if len(buf) != size:
            raise aescbc.InsufficientDataError(f"stream ended after {len(buf)} of {size} IV bytes")
        return bytes(buf)

    @staticmethod
    def encrypt_stream(
        source,
        dest,
        key=None,
        iv=None,
        *,
        chunk_size: "int | None" = None
    ) -> "tuple[int, bytes, bytes]":
        encryptor = aescbc.Encryptor(key, iv, copy_buffer_size=chunk_size)
        written = encryptor.copy(dest, source)
        return written, encryptor.key, encryptor.iv

    @staticmethod
    def decrypt_stream(source, dest, key, *, chunk_size: "int | None" = None) -> int:
        iv = aescbc._read_exact(source, aescbc.IV_LEN)
        decryptor = aescbc.Decryptor(key, iv, copy_buffer_size=chunk_size)
        aescbc._log(f"decrypt stream start buffer={decryptor.copy_buffer_size}")
        written = decryptor._pump(dest, source)
        aescbc._log(f"decrypt stream done written={written}")
        return written

    @staticmethod
    def encrypt_bytes(plaintext, key=None, iv=None) -> "tuple[bytes, bytes]":
        encryptor = aescbc.Encryptor(key, iv)
        encryptor.write(plaintext)
        encryptor.close()
        return encryptor.iv + encryptor.read(), encryptor.key

    @staticmethod
    def decrypt_bytes(blob, key) -> bytes:
        blob = aescbc._coerce_bytes(blob, "blob")
        if len(blob) < aescbc.IV_LEN + aescbc.BLOCK_SIZE:
            raise aescbc.InsufficientDataError("AES-CBC blob too short")
        decryptor = aescbc.Decryptor(key, blob[:aescbc.IV_LEN])
        decryptor.write(blob[aescbc.IV_LEN:])
        decryptor.close()
        return decryptor.read()


__all__ = ["aescbc"]
