# safechat/common/errors.py


class SafeChatError(Exception):
    """Base class for protocol level failures."""


class ProtocolError(SafeChatError):
    pass


class HandshakeError(ProtocolError):
    """The peer answered the handshake with an unexpected header."""


class DuplicateSetupError(ProtocolError):
    """Key material was offered twice on one connection."""
