"""Configuration settings for the file drop server."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

# Network
DEFAULT_BIND = "0.0.0.0:8080"

# Storage limits
DEFAULT_MAX_BYTES = 1024 * 1024 * 1024  # 1GiB

# Filename constraints
MAX_FILENAME_LENGTH = 200

# Directory paths
DEFAULT_DATA_DIR = "./data"
DEFAULT_LOG_DIR = "logs"

# Failure alerting
DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_FAILURE_WINDOW_SECONDS = 60


def parse_bind(value: str) -> Tuple[str, int]:
    """Split a ``host:port`` bind address. IPv6 hosts must be bracketed."""
    host, sep, port = value.strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid bind address: {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"Invalid bind address: {value!r}")
    port_value = int(port)
    if port_value > 65535:
        raise ValueError(f"Invalid bind address: {value!r}")
    return host, port_value


def normalize_base_url(value: str, port: int) -> str:
    """Build the externally visible base URL used in fetch hints."""
    trimmed = value.strip()
    if not trimmed:
        return f"http://localhost:{port}"
    if not trimmed.startswith(("http://", "https://")):
        trimmed = f"https://{trimmed}"
    return trimmed.rstrip("/")


def _int_or_default(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value >= 0 else default


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    max_bytes: int
    public_base_url: str
    host: str = "0.0.0.0"
    port: int = 8080
    log_dir: Optional[Path] = None
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    failure_window_seconds: int = DEFAULT_FAILURE_WINDOW_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Create Settings from environment variables."""
        env = os.environ if environ is None else environ

        host, port = parse_bind(env.get("BIND", DEFAULT_BIND))
        threshold = _int_or_default(env.get("FAILURE_ALERT_THRESHOLD"), DEFAULT_FAILURE_THRESHOLD)
        window = _int_or_default(env.get("FAILURE_ALERT_WINDOW"), DEFAULT_FAILURE_WINDOW_SECONDS)

        return cls(
            data_dir=Path(env.get("DATA_DIR", DEFAULT_DATA_DIR)),
            max_bytes=_int_or_default(env.get("MAX_BYTES"), DEFAULT_MAX_BYTES),
            public_base_url=normalize_base_url(env.get("PUBLIC_BASE_URL", ""), port),
            host=host,
            port=port,
            log_dir=Path(env.get("LOG_DIR", DEFAULT_LOG_DIR)),
            failure_threshold=threshold or DEFAULT_FAILURE_THRESHOLD,
            failure_window_seconds=window or DEFAULT_FAILURE_WINDOW_SECONDS,
        )
