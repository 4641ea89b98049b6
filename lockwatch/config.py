import dataclasses
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from lockwatch.core.errors import ConfigError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

DEFAULT_CONFIG_FILE = "audit.toml"
COLOR_CHOICES = ("auto", "always", "never")


class OutputFormat(Enum):
    HUMAN = "human"
    JSON = "json"


@dataclass(frozen=True)
class OutputConfig:
    format: OutputFormat = OutputFormat.HUMAN
    quiet: bool = False
    # None means "use the default", which is to show trees
    show_tree: Optional[bool] = None
    color: str = "auto"

    def is_quiet(self) -> bool:
        # Structured output must stay machine-parseable
        return self.quiet or self.format is OutputFormat.JSON

    def merge(self, **overrides: Any) -> "OutputConfig":
        """Copy of this config with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        fmt = data.get("format", OutputFormat.HUMAN.value)
        try:
            output_format = OutputFormat(fmt)
        except ValueError:
            choices = ", ".join(f.value for f in OutputFormat)
            raise ConfigError(f"Unknown output format '{fmt}' (expected one of: {choices}).") from None

        quiet = data.get("quiet", False)
        show_tree = data.get("show_tree")
        color = data.get("color", "auto")

        if not isinstance(quiet, bool):
            raise ConfigError("output.quiet must be a boolean.")
        if show_tree is not None and not isinstance(show_tree, bool):
            raise ConfigError("output.show_tree must be a boolean.")
        if color not in COLOR_CHOICES:
            raise ConfigError(f"output.color must be one of: {', '.join(COLOR_CHOICES)}.")

        return cls(format=output_format, quiet=quiet, show_tree=show_tree, color=color)


def load_config(path: Optional[Union[str, Path]] = None) -> OutputConfig:
    """
    Reads the [output] table of an audit.toml file.

    With no path the default file is used if it exists; a missing file
    yields the default configuration.
    """
    path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)

    if not path.exists():
        logging.debug(f"No config file at {path}, using defaults.")
        return OutputConfig()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Error reading {path}: {e}") from e

    output = data.get("output", {})
    if not isinstance(output, dict):
        raise ConfigError(f"{path}: [output] must be a table.")

    logging.debug(f"Loaded output config from {path}: {output}")
    return OutputConfig.from_dict(output)
