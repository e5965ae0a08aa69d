# safechat/common/config.py
"""
Runtime settings, read from the environment at import time.
Command line flags in server.py / client.py override these.
"""
import os

SERVER_BIND = os.environ.get("SAFECHAT_BIND", "0.0.0.0")
SERVER_HOST = os.environ.get("SAFECHAT_HOST", "localhost")
SERVER_PORT = int(os.environ.get("SAFECHAT_PORT", "2345"))

# one recv() is one message, anything larger is cut off
RECV_BUFFER = int(os.environ.get("SAFECHAT_RECV_BUFFER", str(1024 * 1024)))

# pause before SERVER_DONE, no protocol meaning
SERVER_DONE_DELAY = float(os.environ.get("SAFECHAT_DONE_DELAY", "1.0"))

# primes are drawn from [KEY_PRIME_BOUND, 2 * KEY_PRIME_BOUND)
KEY_PRIME_BOUND = int(os.environ.get("SAFECHAT_KEY_BOUND", str(1 << 10)))

LOG_LEVEL = os.environ.get("SAFECHAT_LOG_LEVEL", "INFO")
