# scripts/test.py
"""
Hello test against a running server: send CLIENT_HELLO, check the key.
"""

import sys, os
# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import socket
from safechat.common import config
from safechat.common.protocol import Header, Message, recv_msg, send_msg
from safechat.crypto.rsa import PublicKey, key_fingerprint_hex

SERVER_HOST = "127.0.0.1"
SERVER_PORT = config.SERVER_PORT


def run_test():
    with socket.create_connection((SERVER_HOST, SERVER_PORT)) as s:
        send_msg(s, Message.build(Header.CLIENT_HELLO))
        resp = recv_msg(s)

    if resp is None:
        print("No response")
        return
    print("Server response header:", resp.kind.name)
    if resp.kind != Header.SERVER_HELLO:
        print("Unexpected reply:", resp.text)
        return

    try:
        pub = PublicKey.unmarshal(resp.payload)
    except ValueError as e:
        print("Public key could not be parsed:", e)
        return
    print("Public key:", pub)
    print("Fingerprint:", key_fingerprint_hex(pub))
    e = pub.e.to_int()
    print("Exponent odd and >= 65537:", e % 2 == 1 and e >= 65537)


if __name__ == "__main__":
    run_test()
