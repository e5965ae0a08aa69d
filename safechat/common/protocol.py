# safechat/common/protocol.py
"""
Wire format: one header byte followed by the payload. There is no length
prefix; a single recv() is taken to be exactly one message.
"""
from enum import IntEnum
from typing import Optional, Union

from pydantic import BaseModel, Field

from safechat.common import config


class Header(IntEnum):
    CLIENT_HELLO = 0
    SERVER_HELLO = 1
    CLIENT_DONE = 2
    SERVER_DONE = 3
    ERROR = 4
    CLIENT_MSG = 5
    SERVER_MSG = 6
    CLIENT_CLOSE = 7
    SERVER_CLOSE = 8
    NO_HEADER = 255  # never written by the server

    @classmethod
    def parse(cls, value: int) -> "Header":
        try:
            return cls(value)
        except ValueError:
            return cls.NO_HEADER


# ERROR payloads
ERR_DUPLICATE_HELLO = "client hello failed: received hello request twice"
ERR_DUPLICATE_DONE = "client done failed: received symmetric key twice"
ERR_BAD_SYMMETRIC_KEY = "client done failed: malformed symmetric key"
ERR_EMPTY_MESSAGE = "there is no point in encrypting null messages"
ERR_INVALID_HEADER = "received invalid header"


class Message(BaseModel):
    header: int = Field(ge=0, le=255)
    payload: bytes = b""

    @property
    def kind(self) -> Header:
        return Header.parse(self.header)

    @property
    def text(self) -> str:
        return self.payload.decode(errors="replace")

    def encode(self) -> bytes:
        return bytes([self.header]) + self.payload

    @classmethod
    def decode(cls, raw: bytes) -> "Message":
        if not raw:
            raise ValueError("cannot decode an empty message")
        return cls(header=raw[0], payload=raw[1:])

    @classmethod
    def build(cls, header: Header, payload: Union[bytes, str] = b"") -> "Message":
        if isinstance(payload, str):
            payload = payload.encode()
        return cls(header=int(header), payload=payload)


def send_msg(conn, msg: Message):
    conn.sendall(msg.encode())


def recv_msg(conn, buf: int = None) -> Optional[Message]:
    """One recv, one message. Returns None when the peer has closed."""
    raw = conn.recv(buf or config.RECV_BUFFER)
    if not raw:
        return None
    return Message.decode(raw)
