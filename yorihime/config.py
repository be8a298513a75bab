"""
Configuration models and loaders for yorihime.
Uses Pydantic for validation, TOML for the settings file and JSON for the
address database.
"""

from __future__ import annotations

import json
import sys
from importlib import resources
from pathlib import Path
from typing import Any, Iterator, Literal

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("yorihime.toml")
BUNDLED_DATABASE = "address_db.json"


def parse_hex_offset(value: Any) -> int:
    """Decode a ``"0x"``-prefixed hex string into an address."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str) or not value.lower().startswith("0x"):
        raise ValueError(f"offset must be a hex string prefixed with '0x', got {value!r}")
    try:
        return int(value[2:], 16)
    except ValueError:
        raise ValueError(f"invalid hex offset {value!r}") from None


class GameRecord(BaseModel):
    """Known memory layout of one game."""
    name: str
    process_name: str
    alternate_names: list[str] = Field(default_factory=list)
    score_offset: int
    live_offset: int
    bomb_offset: int

    @field_validator("score_offset", "live_offset", "bomb_offset", mode="before")
    @classmethod
    def decode_offset(cls, v: Any) -> int:
        return parse_hex_offset(v)

    @property
    def names(self) -> list[str]:
        """Process name first, then the alternates."""
        return [self.process_name, *self.alternate_names]


class AddressDatabase(BaseModel):
    """Static process name -> GameRecord mapping."""
    games: dict[str, GameRecord] = Field(default_factory=dict)

    @classmethod
    def from_json(cls, path: str | Path) -> AddressDatabase:
        """Load the database from a JSON file."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate({"games": data})

    @classmethod
    def bundled(cls) -> AddressDatabase:
        """Load the database shipped with the package."""
        text = resources.files("yorihime").joinpath("resources").joinpath(BUNDLED_DATABASE).read_text(encoding="utf-8")
        return cls.model_validate({"games": json.loads(text)})

    def get_game(self, name: str) -> GameRecord | None:
        return self.games.get(name)

    def records(self) -> Iterator[GameRecord]:
        yield from self.games.values()

    def __len__(self) -> int:
        return len(self.games)


class EventsConfig(BaseModel):
    """Input event channel settings."""
    tick_rate_ms: int = 200
    backend: Literal["terminal", "global"] = "terminal"

    @field_validator("tick_rate_ms")
    @classmethod
    def validate_tick_rate(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("tick_rate_ms must be positive")
        return v


class DatabaseConfig(BaseModel):
    """Address database location. Empty path means the bundled file."""
    path: str = ""


class LoggingConfig(BaseModel):
    """Log level and destination. Empty file disables logging."""
    level: str = "INFO"
    file: str = "yorihime.log"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration."""
    events: EventsConfig = Field(default_factory=EventsConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(cls, path: str | Path) -> AppConfig:
        """Load configuration from TOML file."""
        path = Path(path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    @classmethod
    def load(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> AppConfig:
        """Load configuration, falling back to defaults when the file is missing."""
        path = Path(path)
        if not path.exists():
            return cls()
        return cls.from_toml(path)

    @property
    def tick_rate(self) -> float:
        """Tick cadence in seconds."""
        return self.events.tick_rate_ms / 1000

    def load_database(self) -> AddressDatabase:
        if self.database.path:
            return AddressDatabase.from_json(self.database.path)
        return AddressDatabase.bundled()
