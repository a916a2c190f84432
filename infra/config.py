"""
Runtime configuration resolution.

Base configuration (built-in defaults + optional JSON file) overlaid with
SHB_* environment variables. Resolved once at startup, immutable after.
"""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


DEFAULT_HTTP_PORT = 8443
DEFAULT_GREETING = "Hey"

DEFAULTS: Dict[str, Any] = {
    "http_port": DEFAULT_HTTP_PORT,
    "use_https": True,
    "greeting": DEFAULT_GREETING,
}

# Applied in order; PORT comes after SHB_HTTP_PORT so it wins when both are set.
ENV_OVERRIDES = (
    ("SHB_KEYSTORE_FILE", "keystore_file"),
    ("SHB_KEYSTORE_CONTENTS", "keystore_contents"),
    ("SHB_KEYSTORE_PASS", "keystore_pass"),
    ("SHB_HTTP_PORT", "http_port"),
    ("PORT", "http_port"),
    ("SHB_USE_SSL", "use_https"),
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Configuration is missing required fields or holds invalid values."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__(
            "invalid configuration: " + "; ".join(self.problems)
        )


@dataclass(frozen=True)
class EffectiveConfig:
    """Resolved runtime configuration."""

    http_port: int = DEFAULT_HTTP_PORT
    use_tls: bool = True
    keystore_file: Optional[str] = None
    keystore_contents: Optional[bytes] = None  # decoded inline keystore
    keystore_pass: Optional[str] = None
    greeting_prefix: str = DEFAULT_GREETING

    @property
    def certificate_source(self) -> Optional[bytes | str]:
        """Inline keystore bytes if present, else the keystore file path."""
        if self.keystore_contents is not None:
            return self.keystore_contents
        return self.keystore_file


def load_base_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the base configuration from defaults and an optional JSON file.

    Args:
        path: JSON file holding a single object, or None for defaults only

    Returns:
        Mutable dict with the defaults overlaid by the file's keys

    Raises:
        ConfigError: File unreadable or not a JSON object
    """

    base = dict(DEFAULTS)
    if not path:
        return base

    try:
        with open(path, encoding="utf-8") as f:
            file_config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError([f"config file {path}: {e}"])

    if not isinstance(file_config, dict):
        raise ConfigError([f"config file {path}: expected a JSON object"])

    base.update(file_config)
    logger.debug(f"Loaded base configuration from {path}")
    return base


def _to_int(key: str, value: Any, problems: List[str]) -> Optional[int]:
    if isinstance(value, bool):
        problems.append(f"{key}: expected an integer, got {value!r}")
        return None
    if isinstance(value, int):
        port = value
    else:
        text = str(value).strip()
        if not re.fullmatch(r"\d+", text, re.ASCII):
            problems.append(f"{key}: expected an integer, got {value!r}")
            return None
        port = int(text)
    if not 1 <= port <= 65535:
        problems.append(f"{key}: port {port} out of range 1-65535")
        return None
    return port


def _to_bool(key: str, value: Any, problems: List[str]) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    problems.append(f"{key}: expected a boolean, got {value!r}")
    return None


def _present(value: Any) -> bool:
    return value is not None and value != ""


def resolve(
    base_config: Mapping[str, Any],
    environment: Mapping[str, str],
) -> EffectiveConfig:
    """
    Merge base configuration with environment overrides.

    Non-empty environment values overwrite base values; absent or empty
    ones leave the base untouched. TLS fields are validated only when TLS
    is enabled after the overlay.

    Args:
        base_config: Defaults plus file-provided values (see load_base_config)
        environment: Usually os.environ

    Returns:
        EffectiveConfig

    Raises:
        ConfigError: Every missing and invalid field, reported together
    """

    merged = dict(base_config)
    sources = {key: key for key in merged}

    for variable, key in ENV_OVERRIDES:
        value = environment.get(variable)
        if value:
            merged[key] = value
            sources[key] = variable

    problems: List[str] = []

    http_port = _to_int(
        sources.get("http_port", "http_port"),
        merged.get("http_port", DEFAULT_HTTP_PORT),
        problems,
    )
    use_tls = _to_bool(
        sources.get("use_https", "use_https"),
        merged.get("use_https", True),
        problems,
    )

    keystore_file = merged.get("keystore_file") or None
    keystore_pass = merged.get("keystore_pass") or None

    keystore_contents = None
    raw_contents = merged.get("keystore_contents")
    if _present(raw_contents):
        try:
            keystore_contents = base64.b64decode(raw_contents, validate=True)
        except (binascii.Error, TypeError, ValueError):
            problems.append(
                f"{sources.get('keystore_contents', 'keystore_contents')}: "
                "not valid base64"
            )

    check_tls = use_tls
    if check_tls is None:
        # invalid override: validate TLS fields against the base setting
        check_tls = _to_bool("use_https", base_config.get("use_https", True), [])

    if check_tls:
        if not _present(keystore_file) and not _present(raw_contents):
            problems.append("keystore_file or keystore_contents is required")
        if not _present(keystore_pass):
            problems.append("keystore_pass is required")

    if problems:
        raise ConfigError(problems)

    return EffectiveConfig(
        http_port=http_port,
        use_tls=use_tls,
        keystore_file=keystore_file,
        keystore_contents=keystore_contents,
        keystore_pass=keystore_pass,
        greeting_prefix=str(merged.get("greeting") or DEFAULT_GREETING),
    )


def get_config(path: Optional[str], environment: Mapping[str, str]) -> EffectiveConfig:
    """Load the base configuration from `path` and resolve it against `environment`."""
    return resolve(load_base_config(path), environment)
