"""
Bundler configuration.

Options come from three places, lowest precedence first: model defaults, an
optional knapsack.json in the working directory, and explicit overrides (the
CLI flags).
"""
import json
import os
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from packer.errors import ConfigError

CONFIG_FILE = "knapsack.json"
DEFAULT_OUTPUT = os.path.join("dist", "bundle.py")


class BundleConfig(BaseModel):
    """Validated options for one build."""
    entry: str
    output: str = Field(default=DEFAULT_OUTPUT, validate_default=True)
    concurrency: Optional[int] = Field(default=None, ge=1)
    pretty: bool = True
    search_paths: List[str] = Field(default_factory=list)

    @field_validator("entry", "output")
    @classmethod
    def _absolute(cls, value):
        return os.path.abspath(value)

    @field_validator("search_paths")
    @classmethod
    def _absolute_paths(cls, value):
        return [os.path.abspath(p) for p in value]


def read_config_file(config_file=CONFIG_FILE):
    """Load options from a JSON config file, or {} when it doesn't exist."""
    if config_file is None or not os.path.exists(config_file):
        return {}
    try:
        with open(config_file, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config: {e}", path=config_file)
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object", path=config_file)
    return data


def load_config(entry, config_file=CONFIG_FILE, **overrides):
    """
    Build a BundleConfig for entry.

    Args:
        entry: Entry script path, resolved against the current directory
        config_file: Optional JSON file with default options (None to skip)
        **overrides: Explicit options; None values are ignored

    Raises:
        ConfigError: If the file or any option is invalid
    """
    options = read_config_file(config_file)
    options.update({k: v for k, v in overrides.items() if v is not None})
    options["entry"] = entry
    try:
        return BundleConfig(**options)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(
            f"Invalid options: {errors}",
            suggestion=f"Check the command line flags and {CONFIG_FILE}",
        )
