import socket
import threading

import pytest

from safechat import server
from safechat.crypto.bigint import BigInt
from safechat.crypto.keygen import generate_keys


@pytest.fixture(scope="session")
def textbook_keys():
    """(PublicKey, PrivateKey) for p=61, q=53: n=3233, e=65537, d=2753."""
    priv, pub = generate_keys(BigInt.from_int(61), BigInt.from_int(53))
    return pub, priv


@pytest.fixture
def fixed_keygen(textbook_keys):
    calls = []

    def keygen():
        calls.append(1)
        return textbook_keys

    keygen.calls = calls
    return keygen


@pytest.fixture
def live_connection(fixed_keygen):
    """Client end of a socketpair whose other end is served by handle_client."""
    client_sock, server_sock = socket.socketpair()
    result = {}

    def run():
        result["ctx"] = server.handle_client(server_sock, ("test", 0), keygen=fixed_keygen, done_delay=0)

    t = threading.Thread(target=run, daemon=True)
    t.start()
    result["thread"] = t
    client_sock.settimeout(10)
    yield client_sock, result
    client_sock.close()
    t.join(timeout=10)
