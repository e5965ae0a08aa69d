# safechat/crypto/rsa.py
"""
Textbook RSA over BigInt, one byte at a time.

Provides:
 - PublicKey / PrivateKey (frozen pydantic models, "<n>,<x>" marshal format)
 - encrypt_digit(m, pub), decrypt_digit(c, priv)
 - encrypt_bytes(data, pub) -> base64 text of comma separated ciphertexts
 - decrypt_bytes(text, priv) -> bytes
 - key_fingerprint_hex(key) -> SHA-256 of the marshaled key
"""
from typing import Union

from cryptography.hazmat.primitives import hashes
from pydantic import BaseModel, ConfigDict

from safechat.common.utils import b64d, b64e
from safechat.crypto.bigint import BigInt
from safechat.crypto.numtheory import mod_pow


def _split_pair(data: Union[bytes, str]) -> tuple:
    if isinstance(data, bytes):
        data = data.decode("ascii")
    fields = data.split(",")
    if len(fields) != 2:
        raise ValueError(f"expected two comma separated fields, got {len(fields)}")
    return BigInt.from_decimal_string(fields[0]), BigInt.from_decimal_string(fields[1])


class PublicKey(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    n: BigInt
    e: BigInt

    def encrypt(self, m: BigInt) -> BigInt:
        return mod_pow(m, self.e, self.n)

    def marshal(self) -> bytes:
        return f"{self.n},{self.e}".encode("ascii")

    @classmethod
    def unmarshal(cls, data: Union[bytes, str]) -> "PublicKey":
        n, e = _split_pair(data)
        return cls(n=n, e=e)

    def __str__(self):
        return f"<{self.n}, {self.e}>"


class PrivateKey(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    n: BigInt
    d: BigInt

    def decrypt(self, c: BigInt) -> BigInt:
        return mod_pow(c, self.d, self.n)

    def marshal(self) -> bytes:
        return f"{self.n},{self.d}".encode("ascii")

    @classmethod
    def unmarshal(cls, data: Union[bytes, str]) -> "PrivateKey":
        n, d = _split_pair(data)
        return cls(n=n, d=d)

    def __str__(self):
        return f"<{self.n}, {self.d}>"


def encrypt_digit(m: BigInt, pub: PublicKey) -> BigInt:
    return pub.encrypt(m)


def decrypt_digit(c: BigInt, priv: PrivateKey) -> BigInt:
    return priv.decrypt(c)


def encrypt_bytes(data: bytes, pub: PublicKey) -> str:
    """
    Encrypt every byte on its own, join the decimal ciphertexts with ","
    and base64 the result. n must exceed 255 for this to round-trip.
    """
    parts = [str(pub.encrypt(BigInt.from_int(b))) for b in data]
    return b64e(",".join(parts).encode("ascii"))


def decrypt_bytes(text: Union[bytes, str], priv: PrivateKey) -> bytes:
    """Inverse of encrypt_bytes. Raises ValueError on malformed input."""
    joined = b64d(text).decode("ascii")
    if not joined:
        return b""
    out = bytearray()
    for field in joined.split(","):
        m = priv.decrypt(BigInt.from_decimal_string(field))
        out.append(m.to_int() & 0xFF)
    return bytes(out)


def key_fingerprint_hex(key: Union[PublicKey, PrivateKey]) -> str:
    """Return the SHA-256 fingerprint of the marshaled key as a hex string."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(key.marshal())
    return digest.finalize().hex()
