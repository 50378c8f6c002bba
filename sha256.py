"""SHA-256 digest (FIPS 180-4), written out step by step.

This module provides a readable implementation of the SHA-256 hash: message
padding, the 64-word message schedule, the 64-round compression function and
hex encoding of the final state. A SHA256 instance holds the running state
words H[0..7] and computes a single digest; the module-level sha256() builds
a fresh instance per call so separate calls never share state.

"""
import logging
import os
from functools import reduce

logger = logging.getLogger(__name__)

MASK32 = 0xffffffff

ENCODINGS = ("utf-8", "codepoint")

# First 32 bits of the fractional parts of the square roots of the first 8 primes
_IV = (
    0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
    0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19,
)

# First 32 bits of the fractional parts of the cube roots of the first 64 primes
_K = (
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5,
    0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3,
    0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc,
    0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7,
    0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13,
    0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3,
    0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5,
    0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208,
    0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2,
)


def load_default_encoding():
    """Return the str encoding mode from SHA256_ENCODING, or "utf-8"."""
    encoding = os.environ.get("SHA256_ENCODING", "utf-8").strip().lower()
    if encoding not in ENCODINGS:
        raise ValueError("SHA256_ENCODING must be one of %s, got %r" % (ENCODINGS, encoding))
    return encoding


def to_octets(message, encoding=None):
    """Turn a message into the octet sequence that gets hashed.

    bytes-like messages are used as they are. A str is encoded according to
    encoding:
      - "utf-8": standard UTF-8 bytes. Lone surrogates are written out as
        their 3-byte UTF-8 form instead of raising.
      - "codepoint": one octet per UTF-16 code unit, its low 8 bits.
        Identical to latin-1 for code points below 256; a character
        outside the BMP contributes two octets, one per surrogate.
    encoding=None selects load_default_encoding().
    """
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    if not isinstance(message, str):
        raise TypeError("message must be str or bytes-like, not %s" % type(message).__name__)
    if encoding is None:
        encoding = load_default_encoding()
    if encoding == "utf-8":
        return message.encode("utf-8", "surrogatepass")
    elif encoding == "codepoint":
        return message.encode("utf-16-be", "surrogatepass")[1::2]
    else:
        raise ValueError("Unknown encoding mode %r, expected one of %s" % (encoding, ENCODINGS))


class SHA256:

    IV = _IV
    K = _K

    block_size = 64
    digest_size = 32

    def __init__(self):
        """Initialize the running state to the SHA-256 initial vector (IV)."""
        self.H = SHA256.IV

    @staticmethod
    def ROTR(x, n):
        """Rotate the 32-bit word x right by n bits."""
        x = x & MASK32
        return ((x >> n) | (x << (32 - n))) & MASK32

    @staticmethod
    def sigma0(x):
        return SHA256.ROTR(x, 7) ^ SHA256.ROTR(x, 18) ^ (x >> 3)

    @staticmethod
    def sigma1(x):
        return SHA256.ROTR(x, 17) ^ SHA256.ROTR(x, 19) ^ (x >> 10)

    @staticmethod
    def Sigma0(x):
        return SHA256.ROTR(x, 2) ^ SHA256.ROTR(x, 13) ^ SHA256.ROTR(x, 22)

    @staticmethod
    def Sigma1(x):
        return SHA256.ROTR(x, 6) ^ SHA256.ROTR(x, 11) ^ SHA256.ROTR(x, 25)

    @staticmethod
    def Ch(x, y, z):
        """Bitwise choice: bits of y where x is set, bits of z elsewhere."""
        return ((x & y) ^ (~x & z)) & MASK32

    @staticmethod
    def Maj(x, y, z):
        """Bitwise majority of x, y and z."""
        return (x & y) ^ (x & z) ^ (y & z)

    @staticmethod
    def sha256_padded(input_bytes):
        """Return input_bytes padded to a multiple of 64 bytes per SHA-256.

        Padding: 0x80 byte, then 0x00 bytes up to 56 mod 64, then the
        64-bit big-endian length (in bits).
        """
        num_bits = (len(input_bytes) * 8) & 0xffffffffffffffff
        pad_len = (55 - len(input_bytes)) % 64
        return bytes(input_bytes) + b"\x80" + pad_len * b"\x00" + num_bits.to_bytes(8, 'big')

    @staticmethod
    def sha256_blocks(padded_bytes):
        """Split padded bytes into blocks of 16 big-endian 32-bit words."""
        assert len(padded_bytes) % 64 == 0
        blocks = []
        for i in range(0, len(padded_bytes), 64):
            chunk = padded_bytes[i:i+64]
            blocks.append(tuple(int.from_bytes(chunk[j:j+4], 'big') for j in range(0, 64, 4)))
        return blocks

    @staticmethod
    def sha256_schedule(block):
        """Expand a block's 16 words into the 64-word message schedule W."""
        assert len(block) == 16
        W = list(block)
        for t in range(16, 64):
            W.append((SHA256.sigma1(W[t-2]) + W[t-7] + SHA256.sigma0(W[t-15]) + W[t-16]) & MASK32)
        return W

    @staticmethod
    def compress(state, block):
        """Run the 64 rounds on one block and fold the result into state.

        Returns the new state as a tuple; the state passed in is not modified.
        """
        assert len(state) == 8
        W = SHA256.sha256_schedule(block)
        a, b, c, d, e, f, g, h = state

        for t in range(64):
            T1 = (h + SHA256.Sigma1(e) + SHA256.Ch(e, f, g) + SHA256.K[t] + W[t]) & MASK32
            T2 = (SHA256.Sigma0(a) + SHA256.Maj(a, b, c)) & MASK32
            h = g
            g = f
            f = e
            e = (d + T1) & MASK32
            d = c
            c = b
            b = a
            a = (T1 + T2) & MASK32

        return tuple((x + y) & MASK32 for x, y in zip(state, (a, b, c, d, e, f, g, h)))

    def sha256_chunk(self, block):
        """Process one block of 16 words and update the running state."""
        self.H = SHA256.compress(self.H, block)

    def sha256_digest(self, message, encoding=None):
        """Hash message into the running state and return the hex digest.

        Each instance is meant for a single message; use sha256() for the
        one-shot form.
        """
        blocks = SHA256.sha256_blocks(SHA256.sha256_padded(to_octets(message, encoding)))
        logger.debug("hashing %d block(s)", len(blocks))
        self.H = reduce(SHA256.compress, blocks, self.H)
        return self.hexdigest()

    def digest(self):
        """Return the state as 32 raw bytes, word 0 first, big-endian."""
        return b"".join(x.to_bytes(4, 'big') for x in self.H)

    def hexdigest(self):
        """Return the state as 64 lowercase hex digits, word 0 first."""
        return "".join("%08x" % x for x in self.H)


def sha256(message, encoding=None):
    """Return the SHA-256 hex digest of message (str or bytes-like)."""
    return SHA256().sha256_digest(message, encoding)
