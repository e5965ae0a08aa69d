# safechat/common/utils.py
import base64
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def b64e(b: bytes) -> str:
    """Base64 encode bytes -> str."""
    return base64.b64encode(b).decode()


def b64d(s) -> bytes:
    """Base64 decode str/bytes -> bytes. Raises ValueError on bad input."""
    return base64.b64decode(s, validate=True)


def urlsafe_b64e(b: bytes) -> str:
    """URL-safe base64, used when ciphertext is written to the log."""
    return base64.urlsafe_b64encode(b).decode()


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
