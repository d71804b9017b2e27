"""
minishell Core Module

Configuration shared by every subsystem.
"""

from .config_loader import (
    ConfigLoader,
    Config,
    LoggingConfig,
    ExecutorConfig,
    ShellConfig,
    get_config,
)

__all__ = [
    'ConfigLoader',
    'Config',
    'LoggingConfig',
    'ExecutorConfig',
    'ShellConfig',
    'get_config',
]
