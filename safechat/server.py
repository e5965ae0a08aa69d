# safechat/server.py
"""
SafeChat server. One thread per connection, each with its own ServerContext.

Handshake: CLIENT_HELLO -> SERVER_HELLO(pub key) -> CLIENT_DONE(rsa(sym key))
-> SERVER_DONE, then CLIENT_MSG ciphertexts are echoed back as SERVER_MSG.
"""
import argparse
import logging
import socket
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from safechat.common import config
from safechat.common.errors import DuplicateSetupError
from safechat.common.protocol import (
    ERR_BAD_SYMMETRIC_KEY,
    ERR_DUPLICATE_DONE,
    ERR_DUPLICATE_HELLO,
    ERR_EMPTY_MESSAGE,
    ERR_INVALID_HEADER,
    Header,
    Message,
    recv_msg,
    send_msg,
)
from safechat.common.utils import configure_logging, urlsafe_b64e
from safechat.crypto import aes as aesmod
from safechat.crypto.keygen import generate_key_pair
from safechat.crypto.rsa import PrivateKey, PublicKey, decrypt_bytes

log = logging.getLogger(__name__)

KeyGenerator = Callable[[], Tuple[PublicKey, PrivateKey]]


class ServerState(str, Enum):
    """
    Handshake progress of one connection, for logs and inspection.
    Dispatch does not read it: which replies are allowed follows from the
    keys held by the context (no private key = IDLE, private key only =
    HELLO_SENT, both keys = SECURE).
    """

    IDLE = "IDLE"
    HELLO_SENT = "HELLO_SENT"
    SECURE = "SECURE"


@dataclass
class ServerContext:
    """State of one connection. Only the thread serving it touches it."""

    peer: str = "-"
    state: ServerState = ServerState.IDLE
    private_key: Optional[PrivateKey] = None
    sym_key: Optional[bytes] = None

    def set_private_key(self, key: PrivateKey):
        if self.private_key is not None:
            raise DuplicateSetupError("private key was already set")
        self.private_key = key

    def set_sym_key(self, key: bytes):
        if self.sym_key is not None:
            raise DuplicateSetupError("symmetric key was already set")
        self.sym_key = key


def _error(text: str) -> Message:
    return Message.build(Header.ERROR, text)


def on_client_hello(ctx: ServerContext, keygen: KeyGenerator) -> Message:
    log.info("[%s] [client hello] received client hello", ctx.peer)
    if ctx.private_key is not None:
        log.warning("[%s] received hello request twice", ctx.peer)
        return _error(ERR_DUPLICATE_HELLO)
    pub, priv = keygen()
    ctx.set_private_key(priv)
    ctx.state = ServerState.HELLO_SENT
    log.info("[%s] [client hello] issued public key %s", ctx.peer, pub)
    return Message.build(Header.SERVER_HELLO, pub.marshal())


def on_client_done(ctx: ServerContext, payload: bytes, done_delay: float) -> Message:
    if ctx.private_key is None:
        log.warning("[%s] [client done] received before client hello", ctx.peer)
        return _error(ERR_INVALID_HEADER)
    if ctx.sym_key is not None:
        log.warning("[%s] received symmetric key twice", ctx.peer)
        return _error(ERR_DUPLICATE_DONE)
    log.info("[%s] [client done] received encrypted symmetric key: %s", ctx.peer, payload)
    try:
        sym_key = decrypt_bytes(payload, ctx.private_key)
    except ValueError as e:
        log.warning("[%s] [client done] could not decrypt symmetric key: %s", ctx.peer, e)
        return _error(ERR_BAD_SYMMETRIC_KEY)
    if len(sym_key) != aesmod.KEY_SIZE:
        log.warning("[%s] [client done] symmetric key has %d bytes", ctx.peer, len(sym_key))
        return _error(ERR_BAD_SYMMETRIC_KEY)
    ctx.set_sym_key(sym_key)
    log.debug("[%s] [client done] decrypted symmetric key is: %s", ctx.peer, sym_key.hex())
    if done_delay > 0:
        time.sleep(done_delay)
    ctx.state = ServerState.SECURE
    return Message.build(Header.SERVER_DONE)


def on_client_msg(ctx: ServerContext, payload: bytes) -> Optional[Message]:
    log.info("[%s] [message] received encrypted message: %s", ctx.peer, urlsafe_b64e(payload))
    if ctx.sym_key is None:
        # silently dropped, the client gets no reply
        log.warning("[%s] client tried to send message without encryption", ctx.peer)
        return None
    if not payload:
        return _error(ERR_EMPTY_MESSAGE)
    try:
        plain = aesmod.aes_decrypt(ctx.sym_key, payload)
        log.info("[%s] [message] decrypted message: %s", ctx.peer, plain.decode(errors="ignore"))
    except ValueError as e:
        log.warning("[%s] [message] could not decrypt message: %s", ctx.peer, e)
    # echo the ciphertext exactly as received
    return Message.build(Header.SERVER_MSG, payload)


def process_message(
    ctx: ServerContext,
    msg: Message,
    keygen: KeyGenerator = generate_key_pair,
    done_delay: float = None,
) -> Optional[Message]:
    """
    Advance ctx by one client message. Returns the reply, or None for no reply.

    The handlers decide from the keys stored on ctx and only write
    ctx.state to record progress. CLIENT_CLOSE has no handler, so like any
    other unexpected header it gets "received invalid header" and the
    connection stays open until the client hangs up.
    """
    if done_delay is None:
        done_delay = config.SERVER_DONE_DELAY
    kind = msg.kind
    if kind == Header.CLIENT_HELLO:
        return on_client_hello(ctx, keygen)
    if kind == Header.CLIENT_DONE:
        return on_client_done(ctx, msg.payload, done_delay)
    if kind == Header.CLIENT_MSG:
        return on_client_msg(ctx, msg.payload)
    log.warning("[%s] [error] received invalid header %d in state %s", ctx.peer, msg.header, ctx.state.value)
    return _error(ERR_INVALID_HEADER)


def handle_client(conn, addr, keygen: KeyGenerator = generate_key_pair, done_delay: float = None):
    ctx = ServerContext(peer=f"{addr[0]}:{addr[1]}" if isinstance(addr, tuple) else str(addr))
    try:
        while True:
            msg = recv_msg(conn)
            if msg is None:
                break
            reply = process_message(ctx, msg, keygen=keygen, done_delay=done_delay)
            if reply is not None:
                send_msg(conn, reply)
    except OSError as e:
        log.info("[%s] transport failed: %s", ctx.peer, e)
    except Exception:
        log.exception("[%s] connection handler failed", ctx.peer)
    finally:
        log.info("[%s] client disconnected", ctx.peer)
        try:
            conn.close()
        except OSError:
            pass
    return ctx


def serve(bind: str = None, port: int = None):
    bind = bind or config.SERVER_BIND
    port = port or config.SERVER_PORT
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((bind, port))
        s.listen(6)
        log.info("Server listening on %s:%d", bind, port)
        while True:
            try:
                conn, addr = s.accept()
            except OSError as e:
                log.error("Error accepting client: %s", e)
                continue
            log.info("Connection from %s", addr)
            # handle each client in a new thread
            threading.Thread(target=handle_client, args=(conn, addr), daemon=True).start()


def main(argv=None):
    parser = argparse.ArgumentParser(description="SafeChat server")
    parser.add_argument("--bind", default=config.SERVER_BIND)
    parser.add_argument("--port", type=int, default=config.SERVER_PORT)
    parser.add_argument("--log", default=config.LOG_LEVEL, help="log level")
    args = parser.parse_args(argv)
    configure_logging(args.log)
    try:
        serve(args.bind, args.port)
    except KeyboardInterrupt:
        log.info("Server stopped")


if __name__ == "__main__":
    main()
