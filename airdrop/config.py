"""
Settings for the airdrop tooling.

Values come from ``airdrop.toml`` (an ``[airdrop]`` table, or top-level keys)
and are overridden by ``AIRDROP_<NAME>`` environment variables, e.g.
``AIRDROP_CLAIM_TIME_LIMIT=1672531200``.
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import toml

from airdrop.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "airdrop.toml"
ENV_PREFIX = "AIRDROP_"


@dataclass
class Config:
    leaves_file: Path = Path("leaves.json")
    output_dir: Path = Path("snapshot")
    cache_dir: Path = Path("snapshot")
    claim_time_limit: Optional[int] = None
    release_time_limit: Optional[int] = None
    vesting_start: Optional[int] = None
    vesting_duration: Optional[int] = None
    vesting_cliff: Optional[int] = None
    claimer_funding: Optional[int] = None

    @classmethod
    def load(cls, path=None, environ=None):
        environ = os.environ if environ is None else environ
        values = {}
        path = Path(path or environ.get(ENV_PREFIX + "CONFIG", DEFAULT_CONFIG_FILE))
        if path.exists():
            try:
                data = toml.loads(path.read_text())
            except toml.TomlDecodeError as exc:
                raise ConfigError(f"cannot parse {path}: {exc}") from None
            values.update(data.get("airdrop", data))
        for field in fields(cls):
            key = ENV_PREFIX + field.name.upper()
            if key in environ:
                values[field.name] = environ[key]

        known = {field.name: field for field in fields(cls)}
        unknown = set(values) - set(known)
        if unknown:
            raise ConfigError(f"unknown settings: {', '.join(sorted(unknown))}")
        return cls(**{name: _convert(known[name], value) for name, value in values.items()})


def _convert(field, value):
    if value is None:
        return None
    if field.type is Path:
        return Path(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{field.name} must be an integer, got {value!r}") from None
