"""
Configuration for world file parsing and inversion.

Settings can be built in code, from a dictionary, or from a YAML file with a
``world_file`` section:

    world_file:
      encoding: utf-8
      strict_line_count: true
      singular_tolerance: 0.0
"""

import codecs
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"
DEFAULT_SINGULAR_TOLERANCE = 0.0

_CONFIG_SECTION = "world_file"


@dataclass(frozen=True)
class WorldFileConfig:
    """Configuration for reading world files and inverting their transforms.

    Attributes:
        encoding: Text encoding used to decode world files read as bytes.
        strict_line_count: If True, content with more than six non-blank lines
            is rejected. If False, lines after the sixth are ignored.
        singular_tolerance: Determinants with an absolute value at or below
            this threshold are treated as singular by the inverse mapping.
            The default of 0.0 only rejects an exactly zero determinant.
    """
    encoding: str = DEFAULT_ENCODING
    strict_line_count: bool = True
    singular_tolerance: float = DEFAULT_SINGULAR_TOLERANCE

    @classmethod
    def from_yaml(cls, path: str | Path) -> 'WorldFileConfig':
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            WorldFileConfig instance loaded from file

        Raises:
            FileNotFoundError: If configuration file does not exist
            ValueError: If configuration file is malformed or contains invalid values

        Example:
            >>> config = WorldFileConfig.from_yaml('config/world_file.yaml')
            >>> print(config.encoding)
            utf-8
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Please create a configuration file or use get_default_config()"
            )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data:
            raise ValueError(
                f"Configuration file is empty: {path}\n"
                f"Expected a '{_CONFIG_SECTION}' section"
            )

        if not isinstance(data, dict) or _CONFIG_SECTION not in data:
            raise ValueError(
                f"Configuration file missing '{_CONFIG_SECTION}' section: {path}\n"
                f"Expected structure: {_CONFIG_SECTION}:\n  encoding: ...\n  ..."
            )

        logger.debug(f"Loaded world file configuration from {config_path}")
        return cls.from_dict(data[_CONFIG_SECTION] or {})

    @classmethod
    def from_dict(cls, config: dict) -> 'WorldFileConfig':
        """Create configuration from dictionary.

        Missing keys take their default values.

        Args:
            config: Dictionary with any of the keys 'encoding',
                'strict_line_count' and 'singular_tolerance'.

        Returns:
            WorldFileConfig instance

        Raises:
            ValueError: If a key is unknown or a value is invalid

        Example:
            >>> config = WorldFileConfig.from_dict({'strict_line_count': False})
            >>> config.strict_line_count
            False
        """
        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        known_keys = {'encoding', 'strict_line_count', 'singular_tolerance'}
        unknown = sorted(set(config) - known_keys)
        if unknown:
            raise ValueError(
                f"Unknown configuration keys: {', '.join(map(str, unknown))}. "
                f"Must be among: {', '.join(sorted(known_keys))}"
            )

        encoding = config.get('encoding', DEFAULT_ENCODING)
        strict_line_count = config.get('strict_line_count', True)
        singular_tolerance = config.get('singular_tolerance', DEFAULT_SINGULAR_TOLERANCE)

        if not isinstance(encoding, str):
            raise ValueError(f"'encoding' must be a string, got {type(encoding)}")
        try:
            codecs.lookup(encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding '{encoding}'") from None

        if not isinstance(strict_line_count, bool):
            raise ValueError(
                f"'strict_line_count' must be a boolean, got {type(strict_line_count)}"
            )

        # bool is an int subclass; reject it explicitly
        if isinstance(singular_tolerance, bool) or not isinstance(singular_tolerance, (int, float)):
            raise ValueError(
                f"'singular_tolerance' must be a number, got {type(singular_tolerance)}"
            )
        if not math.isfinite(singular_tolerance) or singular_tolerance < 0:
            raise ValueError(
                f"'singular_tolerance' must be finite and non-negative, got {singular_tolerance}"
            )

        return cls(
            encoding=encoding,
            strict_line_count=strict_line_count,
            singular_tolerance=float(singular_tolerance),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation suitable for YAML serialization
        """
        return asdict(self)

    def save_to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path where configuration file should be written.

        Raises:
            IOError: If file cannot be written
        """
        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Wrap in the section name for consistency with from_yaml
        output = {_CONFIG_SECTION: self.to_dict()}

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False)
        except IOError as e:
            raise IOError(f"Failed to write configuration file: {e}") from e

        logger.debug(f"Saved world file configuration to {config_path}")


def get_default_config() -> WorldFileConfig:
    """Return the default configuration.

    UTF-8 content, exactly six lines, and only an exactly zero determinant
    treated as singular.

    Example:
        >>> config = get_default_config()
        >>> config.singular_tolerance
        0.0
    """
    return WorldFileConfig()
