# safechat/client.py
"""
SafeChat client: runs the handshake, then sends one line per turn and
prints the single reply. Lines may select a header with "<number>:<text>".
"""
import argparse
import logging
import re
import secrets
import socket
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from safechat.common import config
from safechat.common.errors import HandshakeError
from safechat.common.protocol import Header, Message, recv_msg, send_msg
from safechat.common.utils import configure_logging, urlsafe_b64e
from safechat.crypto import aes as aesmod
from safechat.crypto.rsa import PublicKey, encrypt_bytes, key_fingerprint_hex

log = logging.getLogger(__name__)

HEADER_PREFIX = re.compile(r"^([0-9]+):")


@dataclass
class ClientContext:
    public_key: Optional[PublicKey] = None
    sym_key: Optional[bytes] = None


def generate_sym_key() -> bytes:
    """Random 32 byte AES key."""
    return secrets.token_bytes(aesmod.KEY_SIZE)


def _expect(conn, header: Header, step: str) -> Message:
    msg = recv_msg(conn)
    if msg is None:
        raise HandshakeError(f"connection closed while waiting for {header.name} ({step})")
    if msg.kind != header:
        raise HandshakeError(f"expected {header.name} during {step}, got header {msg.header}: {msg.text}")
    return msg


def handshake(conn, ctx: ClientContext, sym_key: bytes = None):
    """
    CLIENT_HELLO / SERVER_HELLO / CLIENT_DONE / SERVER_DONE.
    Raises HandshakeError if the server answers out of order.
    """
    send_msg(conn, Message.build(Header.CLIENT_HELLO))
    hello = _expect(conn, Header.SERVER_HELLO, "server hello")
    try:
        ctx.public_key = PublicKey.unmarshal(hello.payload)
    except ValueError as e:
        raise HandshakeError(f"server sent an unreadable public key: {e}") from e
    log.info("[server hello] public key is %s (sha256 %s)", ctx.public_key, key_fingerprint_hex(ctx.public_key))

    sym_key = sym_key or generate_sym_key()
    log.debug("[server hello] generated sym key: %s", sym_key.hex())
    # framed before the key is stored, so the RSA text goes out as-is
    conn.sendall(frame_outgoing(Header.CLIENT_DONE, encrypt_bytes(sym_key, ctx.public_key), ctx))
    ctx.sym_key = sym_key

    _expect(conn, Header.SERVER_DONE, "server done")
    log.info("[server done] handshake complete")


def parse_input_line(line: str) -> Tuple[int, str]:
    """'<0-255>:<text>' picks the header; anything else is a CLIENT_MSG."""
    m = HEADER_PREFIX.match(line)
    if m is None:
        return int(Header.CLIENT_MSG), line
    header = int(m.group(1))
    if header > 255:
        return int(Header.CLIENT_MSG), line
    return header, line[m.end():]


def frame_outgoing(header: int, text: str, ctx: ClientContext) -> bytes:
    payload = text.encode()
    if ctx.sym_key is not None and payload:
        payload = aesmod.aes_encrypt(ctx.sym_key, payload)
    return bytes([header]) + payload


def display_message(msg: Message, ctx: ClientContext) -> str:
    kind = msg.kind
    if kind == Header.SERVER_HELLO:
        try:
            return f"[server hello] public key is {PublicKey.unmarshal(msg.payload)}"
        except ValueError:
            return f"[server hello] unreadable public key: {msg.text}"
    if kind == Header.SERVER_MSG:
        line = f"[message] server encrypted message as: {urlsafe_b64e(msg.payload)}"
        if ctx.sym_key is not None:
            try:
                plain = aesmod.aes_decrypt(ctx.sym_key, msg.payload)
                line += f" ({plain.decode(errors='replace')})"
            except ValueError:
                pass
        return line
    if kind == Header.SERVER_DONE:
        return "[server done] handshake complete"
    if kind == Header.SERVER_CLOSE:
        return f"[server close] {msg.text}"
    if kind == Header.ERROR:
        return f"[error] received error: {msg.text}"
    return f"[error] unexpected header {msg.header}"


def _prompt() -> Optional[str]:
    try:
        return input("Write your message: ")
    except EOFError:
        return None


def chat_loop(conn, ctx: ClientContext, read_line: Callable[[], Optional[str]] = _prompt, out=print):
    """One line out, exactly one reply back, until CLIENT_CLOSE or end of input."""
    while True:
        line = read_line()
        if line is None:
            break
        header, text = parse_input_line(line)
        conn.sendall(frame_outgoing(header, text, ctx))
        reply = recv_msg(conn)
        if reply is None:
            out("[server close] connection closed by server")
            break
        out(display_message(reply, ctx))
        if header == Header.CLIENT_CLOSE:
            break


def parse_address(address: str) -> Tuple[str, int]:
    if not address:
        return config.SERVER_HOST, config.SERVER_PORT
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, config.SERVER_PORT
    return host or config.SERVER_HOST, int(port)


def main(argv=None):
    parser = argparse.ArgumentParser(description="SafeChat client")
    parser.add_argument("--address", help="host:port of the server")
    parser.add_argument("--log", default=config.LOG_LEVEL, help="log level")
    args = parser.parse_args(argv)
    configure_logging(args.log)

    address = args.address
    if address is None:
        try:
            address = input(f"please enter address (defaults to {config.SERVER_HOST}:{config.SERVER_PORT}): ").strip()
        except EOFError:
            address = ""
    host, port = parse_address(address)

    ctx = ClientContext()
    try:
        with socket.create_connection((host, port)) as s:
            handshake(s, ctx)
            chat_loop(s, ctx)
    except HandshakeError as e:
        log.error("an error occurred during the handshake: %s", e)
        sys.exit(1)
    except (OSError, ValueError) as e:
        log.error("connection failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
