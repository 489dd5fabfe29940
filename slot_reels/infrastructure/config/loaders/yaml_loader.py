# slot_reels/infrastructure/config/loaders/yaml_loader.py
import os
import yaml
import json
import logging
from typing import Dict, Any, Optional


class ConfigError(Exception):
    """Base class for errors while loading or validating configuration."""
    pass


class FileNotFoundConfigError(ConfigError):
    """A configuration or schema file does not exist."""
    def __init__(self, path, message=None):
        self.path = path
        self.message = message or f"Configuration file not found: {path}"
        super().__init__(self.message)


class YamlParseError(ConfigError):
    """A YAML file could not be parsed."""
    def __init__(self, file_path, yaml_error):
        self.file_path = file_path
        self.yaml_error = yaml_error
        self.message = f"Error parsing YAML file {file_path}: {str(yaml_error)}"
        super().__init__(self.message)


class SchemaValidationError(ConfigError):
    """A configuration does not match its schema."""
    def __init__(self, file_path, errors):
        self.file_path = file_path
        self.errors = errors
        error_msg = "\n  - ".join([""] + errors)
        self.message = f"Configuration validation failed for {file_path}:{error_msg}"
        super().__init__(self.message)


class YamlConfigLoader:
    """
    Loads machine configuration files and validates them against a JSON schema.

    In strict mode (the default) a missing file, a parse error or a failed
    validation raises; otherwise the loader logs a warning and falls back to
    the supplied default configuration.
    """
    def __init__(self, schema_validator=None):
        """
        Args:
            schema_validator: Optional validator used when a schema path is given
        """
        self.logger = logging.getLogger("infrastructure.config.loader")
        self.schema_validator = schema_validator
        self.strict_mode = True

    def set_strict_mode(self, strict: bool = True):
        self.strict_mode = strict
        return self

    def load_file(self, file_path: str, schema_path: Optional[str] = None,
                  default_config: Optional[Dict[str, Any]] = None,
                  apply_defaults: bool = False) -> Dict[str, Any]:
        """
        Load one YAML configuration file and optionally validate it.

        Args:
            file_path: Path to the YAML file
            schema_path: Optional path to a JSON schema to validate against
            default_config: Configuration returned instead of failing in non-strict mode
            apply_defaults: Fill missing keys from the schema's "default" values

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundConfigError: If the file is missing and strict_mode=True
            YamlParseError: If parsing fails and strict_mode=True
            SchemaValidationError: If validation fails and strict_mode=True
        """
        if not os.path.isfile(file_path):
            self.logger.error(f"Configuration file not found: {file_path}")

            if default_config is not None and not self.strict_mode:
                self.logger.warning(f"Using default configuration instead of missing file: {file_path}")
                return default_config

            raise FileNotFoundConfigError(file_path)

        try:
            with open(file_path, 'r', encoding='utf-8') as file:
                config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            error = YamlParseError(file_path, e)
            self.logger.error(error.message)

            if default_config is not None and not self.strict_mode:
                self.logger.warning(f"Using default configuration due to parse error in {file_path}")
                return default_config

            raise error from e

        self.logger.debug(f"Successfully loaded configuration from {file_path}")

        if config is None:
            self.logger.warning(f"Empty configuration file: {file_path}")
            config = default_config if default_config is not None else {}

        if schema_path and self.schema_validator:
            schema = self._load_schema(schema_path)
            if apply_defaults:
                is_valid, errors, config = self.schema_validator.validate_with_defaults(config, schema)
            else:
                is_valid, errors = self.schema_validator.validate(config, schema)

            if not is_valid:
                error = SchemaValidationError(file_path, errors)

                if self.strict_mode:
                    raise error

                self.logger.warning(f"{error.message}\nUsing unvalidated configuration.")
            else:
                self.logger.debug(f"Successfully validated configuration against schema: {schema_path}")

        return config

    def _load_schema(self, schema_path: str) -> Dict[str, Any]:
        """
        Load a JSON schema file.

        Raises:
            FileNotFoundConfigError: If the schema file is missing
            ConfigError: If the schema is not valid JSON
        """
        if not os.path.isfile(schema_path):
            error_msg = f"Schema file not found: {schema_path}"
            self.logger.error(error_msg)
            raise FileNotFoundConfigError(schema_path, error_msg)

        try:
            with open(schema_path, 'r', encoding='utf-8') as file:
                return json.load(file)
        except json.JSONDecodeError as e:
            error_msg = f"Error parsing schema file {schema_path}: {str(e)}"
            self.logger.error(error_msg)
            raise ConfigError(error_msg) from e
