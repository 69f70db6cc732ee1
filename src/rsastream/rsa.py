"""Provides core RSA functionalities, such as stream encryption, decryption, signing and verification.

Facilitates "textbook" RSA over byte streams. Plaintext is cut into chunks one byte shorter than the largest
whole-byte block that fits under the modulus, each chunk gets a 0xFF marker byte prepended and is encrypted into one
hexadecimal line of ciphertext. Also handles the plain-text key files and the radix-62 identity encoding used to
bind a public key to its owner, plus PKCS#1 PEM interchange of public keys.

Typical usage example:

    pub = RSAPubKey.read(pbfile)
    if pub.verify_identity():
        pub.encrypt_stream(infile, outfile)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import logging
import pathlib
import typing

from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.codec.native import encoder as localize
from pyasn1_modules import rfc8017

from rsastream.numtheory import pow_mod

logger = logging.getLogger(__name__)

MARKER: bytes = b"\xff"
B62_DIGITS: str = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
PEM_TYPES = {
    "PKCS1_PUB": ("-----BEGIN RSA PUBLIC KEY-----", "-----END RSA PUBLIC KEY-----"),
}


def block_size(mod: int) -> int:
    """Largest whole-byte block guaranteed to stay below `mod`.

    Raises:
        ValueError: If the modulus cannot hold a marker byte plus at least one payload byte.
    """
    k = (mod.bit_length() - 1) // 8
    if k < 2:
        raise ValueError("Modulus too small for block encryption.")
    return k


def encrypt(m: int, e: int, n: int) -> int:
    """Encrypts the int-marshalled message `m`."""
    return pow_mod(m, e, n)


def decrypt(c: int, d: int, n: int) -> int:
    """Decrypts the ciphertext integer `c`."""
    return pow_mod(c, d, n)


def sign(m: int, d: int, n: int) -> int:
    """Signs the int-marshalled message `m` with the private exponent."""
    return pow_mod(m, d, n)


def verify(m: int, s: int, e: int, n: int) -> bool:
    """Verifies that `s` is the signature of `m`.

    Args:
        m: The int-marshalled message.
        s: The signature to check.
        e: The public exponent.
        n: The modulus.

    Returns:
        True if the signature matches, False otherwise. Out-of-range signatures never match.
    """
    if not 0 <= s < n:
        return False
    return pow_mod(s, e, n) == m


def encrypt_stream(infile: typing.BinaryIO, outfile: typing.TextIO, n: int, e: int) -> int:
    """Encrypts `infile` block by block, writing one hex line per block to `outfile`.

    Only non-empty chunks become blocks: empty input yields no ciphertext, and input whose length is a multiple of
    the chunk size gets no trailing marker-only block. `decrypt_stream` still accepts such blocks.

    Args:
        infile: Readable binary stream of plaintext.
        outfile: Writable text stream for the ciphertext.
        n: The modulus.
        e: The public exponent.

    Returns:
        The number of blocks written.

    Raises:
        ValueError: If the modulus is too small.
    """
    k = block_size(n)
    count = 0
    while chunk := infile.read(k - 1):
        m = bytes_to_integer(MARKER + chunk)
        outfile.write(f"{encrypt(m, e, n):x}\n")
        count += 1
    logger.debug("Encrypted %d blocks of up to %d bytes.", count, k - 1)
    return count


def decrypt_stream(infile: typing.TextIO, outfile: typing.BinaryIO, n: int, d: int) -> int:
    """Decrypts hex lines from `infile`, writing the recovered bytes to `outfile`.

    Blank lines and zero-valued blocks are skipped.

    Args:
        infile: Readable text stream of ciphertext lines.
        outfile: Writable binary stream for the plaintext.
        n: The modulus.
        d: The private exponent.

    Returns:
        The number of blocks decrypted.

    Raises:
        ValueError: If a line is not hexadecimal or a block is out of range for the modulus.
    """
    block_size(n)
    count = 0
    for line in infile:
        line = line.strip()
        if not line:
            continue
        c = int(line, 16)
        if c == 0:
            continue
        if c >= n:
            raise ValueError("Ciphertext block must be in range [0, mod-1]")
        m = decrypt(c, d, n)
        outfile.write(integer_to_bytes(m)[1:])
        count += 1
    logger.debug("Decrypted %d blocks.", count)
    return count


class RSAKey:
    """The overall RSA key class implementation.

    Holds the two components present in both halves of a pair.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
    """

    def __init__(self, mod: int, expo: int) -> None:
        self.mod = mod
        self.expo = expo

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt/Sign)

        Args:
            message: The int-marshalled message.

        Returns:
            `message**expo % mod`

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return pow_mod(message, self.expo, self.mod)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)


class RSAPubKey(RSAKey):
    """RSA Public Key, bound to an identity by a signature made with its private counterpart.

    Attributes:
        mod: The modulus of the keypair.
        expo: The public exponent.
        signature: Signature of `username`, made with the private exponent.
        username: The identity string the key belongs to.
    """

    def __init__(self, mod: int, expo: int, signature: int = 0, username: str = "") -> None:
        super().__init__(mod, expo)
        self.signature = signature
        self.username = username

    def verify(self, message: int, signature: int) -> bool:
        """Verifies the signature of an int-marshalled message."""
        return verify(message, signature, self.expo, self.mod)

    def verify_identity(self) -> bool:
        """Checks the stored signature against the stored username.

        Returns:
            True if the key's identity checks out, False otherwise (including for usernames with non radix-62
            characters).
        """
        try:
            m = b62_dec(self.username)
        except ValueError:
            return False
        return self.verify(m, self.signature)

    def encrypt_stream(self, infile: typing.BinaryIO, outfile: typing.TextIO) -> int:
        """See `encrypt_stream`."""
        return encrypt_stream(infile, outfile, self.mod, self.expo)

    def write(self, stream: typing.TextIO) -> None:
        """Writes the key as four lines: modulus, exponent and signature in hex, then the username."""
        stream.write(f"{self.mod:x}\n")
        stream.write(f"{self.expo:x}\n")
        stream.write(f"{self.signature:x}\n")
        stream.write(f"{self.username}\n")

    @classmethod
    def read(cls, stream: typing.TextIO) -> "RSAPubKey":
        """Reads a key written by `write`.

        Raises:
            IOError: If the stream is truncated or holds malformed hex.
        """
        mod = _read_hex(stream, "modulus")
        expo = _read_hex(stream, "public exponent")
        signature = _read_hex(stream, "signature")
        username = stream.readline().strip()
        if not username:
            raise IOError("Public key is missing the username line.")
        return cls(mod, expo, signature, username)

    def export_pem(self, file: pathlib.Path) -> None:
        """Export the modulus and exponent to file as a PKCS#1 PEM public key.

        The identity and its signature have no place in PKCS#1 and are left out.

        Args:
            file: The file to export the public key to.
        """
        keydata = rfc8017.RSAPublicKey()
        keydata["modulus"] = self.mod
        keydata["publicExponent"] = self.expo
        encdata = encoder.encode(keydata)
        write_pem(file, "PKCS1_PUB", encdata)

    @classmethod
    def import_pem(cls, file: pathlib.Path) -> "RSAPubKey":
        """Import a PKCS#1 PEM public key from file.

        Args:
            file: The file to import the public key from.

        Returns:
            An RSAPubKey without identity.
        """
        payload = read_pem(file, "PKCS1_PUB")
        keydata, _ = decoder.decode(payload, asn1Spec=rfc8017.RSAPublicKey())
        pykeyd = localize.encode(keydata)
        return cls(pykeyd["modulus"], pykeyd["publicExponent"])


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation, consisting solely of the modulus and private exponent."""

    def sign(self, message: int) -> int:
        """Signs an int-marshalled message.

        Raises:
            ValueError: If the message does not fit under the modulus.
        """
        return self.c_rsa(message)

    def decrypt_stream(self, infile: typing.TextIO, outfile: typing.BinaryIO) -> int:
        """See `decrypt_stream`."""
        return decrypt_stream(infile, outfile, self.mod, self.expo)

    def write(self, stream: typing.TextIO) -> None:
        """Writes the key as two hex lines: modulus and private exponent."""
        stream.write(f"{self.mod:x}\n")
        stream.write(f"{self.expo:x}\n")

    @classmethod
    def read(cls, stream: typing.TextIO) -> "RSAPrivKey":
        """Reads a key written by `write`.

        Raises:
            IOError: If the stream is truncated or holds malformed hex.
        """
        mod = _read_hex(stream, "modulus")
        expo = _read_hex(stream, "private exponent")
        return cls(mod, expo)


def _read_hex(stream: typing.TextIO, what: str) -> int:
    line = stream.readline().strip()
    if not line:
        raise IOError(f"Key file ends before the {what}.")
    try:
        return int(line, 16)
    except ValueError as err:
        raise IOError(f"Key file holds a malformed {what}: {line!r}") from err


def read_pem(file: pathlib.Path, subtype: str) -> bytes:
    """Reads a PEM encoded file.

    Args:
        file: The file to read.
        subtype: The subtype of PEM encoding to accept.

    Returns:
        The decoded PEM encoded file.

    Raises:
        IOError: If the file has invalid PEM encoding.
    """
    curr_type = PEM_TYPES[subtype]
    with open(file, "r", encoding="ascii") as f:
        headline = f.readline().strip()
        if headline != curr_type[0]:
            raise IOError(f"PEM Headline {headline} does not match {curr_type[0]}")
        parcel = []
        while True:
            line = f.readline().strip()
            if not line:
                raise IOError(f"PEM File does not contain footer: {curr_type[1]}")
            if line == curr_type[1]:
                break
            parcel.append(line)
    return base64.b64decode("".join(parcel), validate=True)


def write_pem(file: pathlib.Path, subtype: str, data: bytes) -> None:
    """Writes a PEM encoded file.

    Args:
        file: The file to write.
        subtype: The subtype of PEM encoding to write.
        data: The data to write.
    """
    curr_type = PEM_TYPES[subtype]
    payload = base64.b64encode(data).decode()
    with open(file, "w", encoding="ascii") as f:
        f.write(curr_type[0] + "\n")
        res = "\n".join(payload[i:i + 64] for i in range(0, len(payload), 64))
        res += "\n" if res else ""
        f.write(res)
        f.write(curr_type[1] + "\n")


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer, big-endian."""
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int) -> bytes:
    """Converts an integer to its shortest big-endian byte string."""
    return msg.to_bytes((msg.bit_length() + 7) // 8, byteorder="big", signed=False)


def b62_dec(msg: str) -> int:
    """Reads a string as a radix-62 number.

    Digits are 0-9, then A-Z, then a-z, so "alice" is a perfectly good number.

    Args:
        msg: The string to convert.

    Returns:
        The represented integer.

    Raises:
        ValueError: If the string is empty or holds a character outside the alphabet.
    """
    if not msg:
        raise ValueError("Cannot convert an empty string.")
    res = 0
    for ch in msg:
        digit = B62_DIGITS.find(ch)
        if digit < 0:
            raise ValueError(f"Invalid radix-62 digit: {ch!r}")
        res = res * 62 + digit
    return res


def b62_enc(msg: int) -> str:
    """Writes a non-negative integer in radix 62. Inverse of `b62_dec` up to leading zeros.

    Not used by the key or stream code, kept for inspecting identity integers (for instance a signature check
    result) as text.
    """
    if msg < 0:
        raise ValueError("msg must be >= 0")
    digits = []
    while True:
        msg, rem = divmod(msg, 62)
        digits.append(B62_DIGITS[rem])
        if not msg:
            break
    return "".join(reversed(digits))
