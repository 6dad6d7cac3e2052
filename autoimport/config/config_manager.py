"""
Configuration manager for JavaScript Auto Import.
Handles loading, validation, and management of configuration settings.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, List, Optional

from jsonschema import validate, ValidationError


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


DEFAULT_INCLUDE_PATTERNS = ['*.js', '*.mjs', '*.jsx']
DEFAULT_EXCLUDE_PATTERNS = ['node_modules']


class ConfigManager:
    """Manages configuration loading, validation, and access."""

    def __init__(self, config_path: str):
        """
        Initialize ConfigManager with path to config file.

        Args:
            config_path: Path to the JSON configuration file
        """
        self.config_path = Path(config_path)
        self.schema_path = Path(__file__).parent / "config_schema.json"
        self._config = None
        self._schema = None

        self._load_schema()
        self._load_config()
        self._validate_config()

    def _load_schema(self) -> None:
        """Load the configuration schema."""
        try:
            with open(self.schema_path, 'r') as f:
                self._schema = json.load(f)
        except FileNotFoundError:
            raise ConfigValidationError(f"Schema file not found: {self.schema_path}")
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON in schema file: {e}")

    def _load_config(self) -> None:
        """Load the configuration file."""
        if not self.config_path.exists():
            raise ConfigValidationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = json.load(f)

        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON in config file: {e}")
        except OSError as e:
            raise ConfigValidationError(f"Error reading config file: {e}")

    def _validate_config(self) -> None:
        """Validate the configuration against the schema."""
        try:
            validate(instance=self._config, schema=self._schema)
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation error: {e.message}")

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the config value (e.g., 'output.mode')
            default: Default value if key is not found

        Returns:
            The configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_output_mode(self) -> str:
        """Get the output mode."""
        return self.get('output.mode', 'in_place')

    def should_confirm_changes(self) -> bool:
        """Check if changes should be confirmed."""
        return self.get('output.confirm_changes', False)

    def should_show_diffs(self) -> bool:
        """Check if diffs should be shown."""
        return self.get('output.show_diffs', False)

    def get_new_files_suffix(self) -> str:
        """Get the suffix for new files."""
        return self.get('output.new_files_suffix', '_autoimport')

    def get_include_patterns(self) -> List[str]:
        """Get file include patterns."""
        return self.get('file_selection.include_patterns', DEFAULT_INCLUDE_PATTERNS)

    def get_exclude_patterns(self) -> List[str]:
        """Get file exclude patterns."""
        return self.get('file_selection.exclude_patterns', DEFAULT_EXCLUDE_PATTERNS)

    def is_recursive(self) -> bool:
        """Check if search should be recursive."""
        return self.get('file_selection.recursive', True)

    def get_ordering(self) -> str:
        """Get the import ordering policy ('batched' or 'interleaved')."""
        return self.get('ordering', 'batched')

    def get_base_dir(self) -> str:
        """
        Get the base directory handed to import resolution callbacks.

        Relative paths are resolved against the configuration file's directory.

        Returns:
            Absolute base directory path
        """
        base_dir = self.get('base_dir')
        if base_dir is None:
            return os.getcwd()
        return str((self.config_path.parent / base_dir).resolve())

    def get_resolution_option(self) -> Dict[str, Any]:
        """
        Get the import resolution settings in the shape `build_resolution` accepts.

        Returns:
            Mapping of static imports, plus a `declarations` list when configured
        """
        option: Dict[str, Any] = dict(self.get('imports', {}))
        declarations: Optional[list] = self.get('declarations')
        if declarations:
            option['declarations'] = declarations
        return option

    def reload(self) -> None:
        """Reload the configuration from file."""
        self._load_config()
        self._validate_config()
