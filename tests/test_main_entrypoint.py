"""
Entry Point Tests

Startup must fail closed: no server on invalid configuration.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

import main
from infra.config import EffectiveConfig


CLEAN_ENV = {"SHB_USE_SSL": "false", "PORT": "8000"}


class TestMain:
    """Test main() startup behavior."""

    def test_config_error_does_not_bind(self):
        with patch.dict("os.environ", {"SHB_USE_SSL": "true"}, clear=True), \
                patch("main.load_dotenv"), \
                patch("uvicorn.run") as run:
            status = main.main([])

        assert status == 1
        run.assert_not_called()

    def test_malformed_override_does_not_bind(self):
        env = {"SHB_USE_SSL": "false", "PORT": "eighty"}
        with patch.dict("os.environ", env, clear=True), \
                patch("main.load_dotenv"), \
                patch("uvicorn.run") as run:
            status = main.main([])

        assert status == 1
        run.assert_not_called()

    def test_unicode_digit_port_does_not_bind(self):
        env = {"SHB_USE_SSL": "false", "PORT": "²"}
        with patch.dict("os.environ", env, clear=True), \
                patch("main.load_dotenv"), \
                patch("uvicorn.run") as run:
            status = main.main([])

        assert status == 1
        run.assert_not_called()

    def test_plain_http_startup(self):
        with patch.dict("os.environ", CLEAN_ENV, clear=True), \
                patch("main.load_dotenv"), \
                patch("uvicorn.run") as run:
            status = main.main(["--host", "127.0.0.1"])

        assert status == 0
        run.assert_called_once()
        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8000
        assert "ssl_certfile" not in kwargs

    def test_tls_startup_passes_keystore(self):
        env = {"SHB_KEYSTORE_FILE": "/etc/shb/keystore.pem", "SHB_KEYSTORE_PASS": "secret"}
        with patch.dict("os.environ", env, clear=True), \
                patch("main.load_dotenv"), \
                patch("uvicorn.run") as run:
            status = main.main([])

        assert status == 0
        kwargs = run.call_args.kwargs
        assert kwargs["port"] == 8443
        assert kwargs["ssl_certfile"] == "/etc/shb/keystore.pem"
        assert kwargs["ssl_keyfile"] == "/etc/shb/keystore.pem"
        assert kwargs["ssl_keyfile_password"] == "secret"

    def test_conf_file_is_read(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"use_https": false, "http_port": 9090}')

        with patch.dict("os.environ", {}, clear=True), \
                patch("main.load_dotenv"), \
                patch("uvicorn.run") as run:
            status = main.main(["--conf", str(path)])

        assert status == 0
        assert run.call_args.kwargs["port"] == 9090


class TestTlsOptions:
    """Test uvicorn TLS argument construction."""

    def test_disabled(self, tmp_path):
        config = EffectiveConfig(use_tls=False)
        assert main.tls_options(config, str(tmp_path)) == {}

    def test_keystore_path(self, tmp_path):
        config = EffectiveConfig(keystore_file="/k.pem", keystore_pass="pw")

        options = main.tls_options(config, str(tmp_path))

        assert options == {
            "ssl_certfile": "/k.pem",
            "ssl_keyfile": "/k.pem",
            "ssl_keyfile_password": "pw",
        }

    def test_inline_contents_written_to_workdir(self, tmp_path):
        raw = b"-----BEGIN CERTIFICATE-----\n"
        config = EffectiveConfig(
            keystore_file="/ignored.pem", keystore_contents=raw, keystore_pass="pw"
        )

        options = main.tls_options(config, str(tmp_path))

        keystore = Path(options["ssl_certfile"])
        assert keystore.parent == tmp_path
        assert keystore.read_bytes() == raw
        assert options["ssl_keyfile"] == options["ssl_certfile"]
        assert options["ssl_keyfile_password"] == "pw"


@pytest.mark.parametrize("prefix", ["Hey", "Hello"])
def test_create_app_stores_greeting(prefix):
    app = main.create_app(EffectiveConfig(use_tls=False, greeting_prefix=prefix))
    assert app.state.greeting_prefix == prefix
