# safechat/crypto/aes.py
from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

BLOCK = AES.block_size  # 16
KEY_SIZE = 32


def aes_encrypt(key: bytes, plaintext: bytes) -> bytes:
    """
    AES-256 CBC + PKCS7 padding, random IV prepended to the ciphertext.
    No integrity protection. Key must be 32 bytes.
    """
    if len(key) != KEY_SIZE:
        raise ValueError("Key length must be 32 bytes")
    iv = get_random_bytes(BLOCK)
    cipher = AES.new(key, AES.MODE_CBC, iv)
    return iv + cipher.encrypt(pad(plaintext, BLOCK))


def aes_decrypt(key: bytes, ciphertext: bytes) -> bytes:
    if len(key) != KEY_SIZE:
        raise ValueError("Key length must be 32 bytes")
    if len(ciphertext) < 2 * BLOCK or len(ciphertext) % BLOCK:
        raise ValueError("ciphertext is not a whole number of blocks")
    cipher = AES.new(key, AES.MODE_CBC, ciphertext[:BLOCK])
    return unpad(cipher.decrypt(ciphertext[BLOCK:]), BLOCK)
