# scripts/gen_keys.py
"""
Generate a demonstration RSA key pair and print it in the wire format.
Usage: python scripts/gen_keys.py [bound]
"""
import os
import sys

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from safechat.crypto.keygen import generate_key_pair
from safechat.crypto.rsa import decrypt_bytes, encrypt_bytes, key_fingerprint_hex


def main():
    bound = int(sys.argv[1]) if len(sys.argv) > 1 else None
    pub, priv = generate_key_pair(bound)
    print("public :", pub.marshal().decode())
    print("private:", priv.marshal().decode())
    print("sha256 :", key_fingerprint_hex(pub))

    sample = b"round trip"
    ok = decrypt_bytes(encrypt_bytes(sample, pub), priv) == sample
    print("round trip OK" if ok else "round trip FAILED")


if __name__ == "__main__":
    main()
