"""
minishell Configuration Loader

- JSON configuration file loading
- Default value handling
- Runtime configuration updates through dot-notation keys
- Type-safe access to configuration values
"""

import json
import threading
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from minishell.exceptions import ConfigValidationError


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    use_colors: bool = True


@dataclass
class ExecutorConfig:
    """Simple command execution settings."""
    create_mode: int = 0o644  # permissions of files created by redirection
    exec_failure_status: int = 1
    search_path: bool = True  # resolve verbs through PATH


@dataclass
class ShellConfig:
    """Front end settings."""
    prompt: str = "> "
    parser: Optional[str] = None  # "module:attribute" of a parser factory


@dataclass
class Config:
    """
    Main configuration container.

    Holds all configuration settings for the shell.
    """
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)


class ConfigLoader:
    """
    Configuration loader and manager.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('minishell.json')
        >>> print(config.shell.prompt)
        >
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigValidationError: If the file cannot be loaded or parsed
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigValidationError(
                f"Configuration file not found: {config_path}"
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Invalid JSON in configuration file: {e}"
            )
        except OSError as e:
            raise ConfigValidationError(
                f"Cannot read configuration file: {e}"
            )

        if not isinstance(data, dict):
            raise ConfigValidationError(
                "Configuration root must be a JSON object"
            )

        self._config = self._parse_config(data)
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into Config object."""
        config = Config()

        if 'logging' in data:
            log_data = data['logging']
            config.logging = LoggingConfig(
                level=log_data.get('level', config.logging.level),
                log_file=log_data.get('log_file', config.logging.log_file),
                use_colors=log_data.get('use_colors', config.logging.use_colors),
            )

        if 'executor' in data:
            exec_data = data['executor']
            create_mode = exec_data.get('create_mode', config.executor.create_mode)
            # JSON has no octal literals; accept "0644" style strings
            if isinstance(create_mode, str):
                try:
                    create_mode = int(create_mode, 8)
                except ValueError:
                    raise ConfigValidationError(
                        f"Invalid file mode: {create_mode}",
                        key="executor.create_mode"
                    )
            config.executor = ExecutorConfig(
                create_mode=create_mode,
                exec_failure_status=exec_data.get(
                    'exec_failure_status', config.executor.exec_failure_status
                ),
                search_path=exec_data.get('search_path', config.executor.search_path),
            )

        if 'shell' in data:
            shell_data = data['shell']
            config.shell = ShellConfig(
                prompt=shell_data.get('prompt', config.shell.prompt),
                parser=shell_data.get('parser', config.shell.parser),
            )

        return config

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'executor.create_mode')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        obj: Any = self._config

        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        Args:
            key: Dot-notation key (e.g., 'shell.prompt')
            value: Value to set

        Note:
            This modifies configuration at runtime but does not
            persist changes to disk.
        """
        parts = key.split('.')
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

        final_key = parts[-1]
        if final_key in {f.name for f in fields(obj)}:
            setattr(obj, final_key, value)
        else:
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

    def reset(self) -> None:
        """Drop any loaded or runtime settings and return to defaults."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, list):
                return [dataclass_to_dict(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: dataclass_to_dict(v) for k, v in obj.items()}
            else:
                return obj

        return dataclass_to_dict(self._config)


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    return ConfigLoader().config
