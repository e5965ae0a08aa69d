import pytest

from safechat import client
from safechat.common import config
from safechat.common.protocol import Header, Message
from safechat.crypto.aes import aes_decrypt, aes_encrypt
from safechat.crypto.rsa import PublicKey

SYM_KEY = b"k" * 32


class TestParseInputLine:

    @pytest.mark.parametrize("line,expected", [
        ("hello", (Header.CLIENT_MSG, "hello")),
        ("", (Header.CLIENT_MSG, "")),
        ("7:bye", (Header.CLIENT_CLOSE, "bye")),
        ("0:", (Header.CLIENT_HELLO, "")),
        ("5:a:b", (Header.CLIENT_MSG, "a:b")),
        ("42:odd header", (42, "odd header")),
        ("255:x", (255, "x")),
        ("256:x", (Header.CLIENT_MSG, "256:x")),
        ("time is 10:30", (Header.CLIENT_MSG, "time is 10:30")),
        ("-1:x", (Header.CLIENT_MSG, "-1:x")),
        (":x", (Header.CLIENT_MSG, ":x")),
    ])
    def test_parse(self, line, expected):
        assert client.parse_input_line(line) == expected


class TestFrameOutgoing:

    def test_plain_before_key(self):
        ctx = client.ClientContext()
        assert client.frame_outgoing(Header.CLIENT_MSG, "hi", ctx) == b"\x05hi"

    def test_encrypted_with_key(self):
        ctx = client.ClientContext(sym_key=SYM_KEY)
        framed = client.frame_outgoing(Header.CLIENT_MSG, "hi", ctx)
        assert framed[0] == Header.CLIENT_MSG
        assert aes_decrypt(SYM_KEY, framed[1:]) == b"hi"

    def test_empty_message_not_encrypted(self):
        ctx = client.ClientContext(sym_key=SYM_KEY)
        assert client.frame_outgoing(Header.CLIENT_MSG, "", ctx) == b"\x05"

    def test_arbitrary_header(self):
        ctx = client.ClientContext()
        assert client.frame_outgoing(200, "x", ctx) == b"\xc8x"


class TestDisplayMessage:

    def test_server_msg_shows_plaintext(self):
        ctx = client.ClientContext(sym_key=SYM_KEY)
        line = client.display_message(Message.build(Header.SERVER_MSG, aes_encrypt(SYM_KEY, b"pong")), ctx)
        assert line.startswith("[message] server encrypted message as: ")
        assert line.endswith("(pong)")

    @pytest.mark.parametrize("msg,expected", [
        (Message.build(Header.ERROR, "bad"), "[error] received error: bad"),
        (Message.build(Header.SERVER_CLOSE, "bye"), "[server close] bye"),
        (Message.build(Header.SERVER_DONE), "[server done] handshake complete"),
        (Message.build(Header.SERVER_HELLO, b"3233,65537"), "[server hello] public key is <3233, 65537>"),
        (Message(header=99), "[error] unexpected header 99"),
    ])
    def test_render(self, msg, expected):
        assert client.display_message(msg, client.ClientContext()) == expected


class TestChatLoop:

    def test_echo_then_close(self, live_connection):
        conn, _ = live_connection
        ctx = client.ClientContext()
        client.handshake(conn, ctx, sym_key=SYM_KEY)
        lines = iter(["hello there", "5:", "99:what", "7:done", "never sent"])
        seen = []
        client.chat_loop(conn, ctx, read_line=lambda: next(lines), out=seen.append)
        assert seen[0].endswith("(hello there)")
        assert seen[1] == "[error] received error: there is no point in encrypting null messages"
        assert seen[2] == "[error] received error: received invalid header"
        assert seen[3] == "[error] received error: received invalid header"
        assert len(seen) == 4
        assert next(lines) == "never sent"

    def test_end_of_input(self, live_connection):
        conn, _ = live_connection
        seen = []
        client.chat_loop(conn, client.ClientContext(), read_line=lambda: None, out=seen.append)
        assert seen == []


class TestAddress:

    @pytest.mark.parametrize("text,expected", [
        ("", (config.SERVER_HOST, config.SERVER_PORT)),
        ("example.org:9000", ("example.org", 9000)),
        ("example.org", ("example.org", config.SERVER_PORT)),
        (":9000", (config.SERVER_HOST, 9000)),
    ])
    def test_parse_address(self, text, expected):
        assert client.parse_address(text) == expected

    def test_bad_port(self):
        with pytest.raises(ValueError):
            client.parse_address("host:port")


def test_main_exits_on_handshake_error(monkeypatch):
    import socket

    server_end, client_end = socket.socketpair()
    server_end.sendall(b"\x04go away")
    monkeypatch.setattr(client.socket, "create_connection", lambda addr: client_end)
    try:
        with pytest.raises(SystemExit) as exc:
            client.main(["--address", "localhost:1"])
        assert exc.value.code == 1
    finally:
        server_end.close()


def test_main_address_prompt_end_of_input(monkeypatch):
    def no_input(prompt=""):
        raise EOFError

    dialed = []

    def refuse(addr):
        dialed.append(addr)
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr("builtins.input", no_input)
    monkeypatch.setattr(client.socket, "create_connection", refuse)
    with pytest.raises(SystemExit) as exc:
        client.main([])
    assert exc.value.code == 1
    assert dialed == [(config.SERVER_HOST, config.SERVER_PORT)]


def test_public_key_logged_with_fingerprint(live_connection, caplog):
    conn, _ = live_connection
    ctx = client.ClientContext()
    with caplog.at_level("INFO", logger="safechat.client"):
        client.handshake(conn, ctx, sym_key=SYM_KEY)
    assert isinstance(ctx.public_key, PublicKey)
    assert any("sha256" in r.getMessage() for r in caplog.records)
