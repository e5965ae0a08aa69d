# tests/manual/invalid_test.py
# Probe a running server with out-of-order traffic on one connection:
# message before handshake (no reply expected), duplicate hello,
# unknown header and empty message (ERROR expected each time).

import socket

from safechat.client import ClientContext, handshake
from safechat.common import config
from safechat.common.protocol import Header, Message, recv_msg, send_msg

HOST = "127.0.0.1"
PORT = config.SERVER_PORT


def show(label, msg):
    if msg is None:
        print(f"{label}: no response")
    else:
        print(f"{label}: {msg.kind.name} {msg.text!r}")


def main():
    with socket.create_connection((HOST, PORT)) as s:
        send_msg(s, Message.build(Header.CLIENT_MSG, b"plaintext before handshake"))
        s.settimeout(2)
        try:
            show("message before handshake", recv_msg(s))
        except socket.timeout:
            print("message before handshake: silently dropped (expected)")
        s.settimeout(None)

        send_msg(s, Message.build(Header.CLIENT_HELLO))
        show("first hello", recv_msg(s))
        send_msg(s, Message.build(Header.CLIENT_HELLO))
        show("second hello", recv_msg(s))

        s.sendall(b"\x2aunknown header")
        show("unknown header", recv_msg(s))

    with socket.create_connection((HOST, PORT)) as s:
        ctx = ClientContext()
        handshake(s, ctx)
        send_msg(s, Message.build(Header.CLIENT_MSG))
        show("empty message", recv_msg(s))
        send_msg(s, Message.build(Header.CLIENT_CLOSE))
        show("close (invalid header expected)", recv_msg(s))


if __name__ == "__main__":
    main()
