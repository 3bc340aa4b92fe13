"""Common utility functions."""

from __future__ import annotations

import re
import secrets
import string
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

ALPHABETIC = string.ascii_letters
ALPHANUMERIC = string.ascii_letters + string.digits
# Letters without the look-alikes O, I and l
READABLE_ALPHABETIC = "".join(c for c in ALPHABETIC if c not in "OIl")

# RFC 3339, second resolution
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier."""
    timestamp = utcnow().strftime("%Y%m%d_%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    if prefix:
        return f"{prefix}_{timestamp}_{short_uuid}"
    return f"{timestamp}_{short_uuid}"


def random_string(length: int, charset: str = ALPHANUMERIC) -> str:
    """Generate a random string of the given length from charset."""
    if length <= 0:
        raise ValueError(f"Length must be positive: {length}")
    return "".join(secrets.choice(charset) for _ in range(length))


def format_timestamp(value: Optional[datetime] = None) -> str:
    """Format a datetime (default: now) as a UTC RFC 3339 string."""
    value = value or utcnow()
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def format_duration(seconds: int) -> str:
    """Format seconds to human-readable duration."""
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes}m {secs}s"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs}s"


def load_yaml(path: str | Path) -> dict:
    """Load a YAML file."""
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def ensure_dir(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    """Sanitize a string to be used as a filename."""
    name = name.replace(' ', '_')
    # Colons are kept for RFC 3339 timestamps
    name = re.sub(r'[^\w\-.:+@]', '', name)
    return name[:255]


def tail(text: str, lines: int = 20) -> str:
    """Return the last `lines` non-empty lines of text."""
    kept = [line for line in text.splitlines() if line.strip()]
    return "\n".join(kept[-lines:])

