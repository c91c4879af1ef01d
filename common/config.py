#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
from pathlib import Path

import yaml
from packaging import version

from deathclock.errors import ConfigError


DEFAULT_LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

# Service settings and their defaults
DEFAULTS = {
    'settings_file': None,  # None -> ~/.deathclock/settings.json
    'debounce_seconds': 1.0,
    'tick_interval': 1.0,
}


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, catching OSError on Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            # EINVAL on a handle in an inconsistent state
            if e.errno != 22:
                raise


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, (str, Path)):
        handler = RobustFileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(name):
    """Map 'debug'/'info'/... to a logging constant

    Raises:
        ConfigError: If the level name is unknown
    """
    level = getattr(logging, str(name).upper(), None)
    if not isinstance(level, int):
        raise ConfigError(f'Unknown log level: {name}')
    return level


def load_config_file(config_file):
    """Read a JSON or YAML config file, chosen by extension

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    path = Path(config_file)
    try:
        with open(path, 'r', encoding='utf-8') as fp:
            if path.suffix in ('.yaml', '.yml'):
                conf = yaml.safe_load(fp)
            else:
                conf = json.load(fp)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f'Cannot load config {path}: {e}') from e

    if conf is None:
        conf = {}
    if not isinstance(conf, dict):
        raise ConfigError(f'Config {path} must be a mapping')
    return conf


def get_config(config_file=None, configure_logging=True):
    """Load the countdown service configuration

    Config v1 is flat (settings_file, debounce_seconds, tick_interval,
    log_level, log_file). Config v2 (version >= 2.0) nests the service keys
    under 'countdown' and the logging keys under 'logging'.

    Args:
        config_file: Path to a .json/.yaml/.yml file, or None for defaults
        configure_logging: Set up root logging from the config

    Returns:
        Dictionary with the service settings plus 'log_level' (int),
        'log_file' and 'log_format'

    Raises:
        ConfigError: If the file or any value is invalid
    """
    conf = load_config_file(config_file) if config_file else {}

    config_version = conf.get('version', '1.0')
    try:
        is_v2 = version.parse(str(config_version)) >= version.parse('2.0')
    except version.InvalidVersion as e:
        raise ConfigError(f'Invalid config version: {config_version}') from e

    if is_v2:
        section = conf.get('countdown', {}) or {}
        logging_config = conf.get('logging', {}) or {}
        for name, value in (('countdown', section), ('logging', logging_config)):
            if not isinstance(value, dict):
                raise ConfigError(
                    f"'{name}' section must be a mapping, got {type(value).__name__}"
                )
        log_level_str = logging_config.get('level', 'info')
        log_file = logging_config.get('file')
        log_format = logging_config.get('format', DEFAULT_LOG_FORMAT)
    else:
        section = conf
        log_level_str = conf.get('log_level', 'info')
        log_file = conf.get('log_file')
        log_format = DEFAULT_LOG_FORMAT

    result = {key: section.get(key, default) for key, default in DEFAULTS.items()}

    for key in ('debounce_seconds', 'tick_interval'):
        try:
            result[key] = float(result[key])
        except (TypeError, ValueError) as e:
            raise ConfigError(f'{key} must be a number, got {result[key]!r}') from e
        if result[key] < 0 or (key == 'tick_interval' and result[key] == 0):
            raise ConfigError(f'{key} out of range: {result[key]}')

    if result['settings_file']:
        result['settings_file'] = Path(result['settings_file']).expanduser()

    result['log_level'] = parse_log_level(log_level_str)
    result['log_file'] = log_file
    result['log_format'] = log_format

    if configure_logging:
        logging.basicConfig(level=result['log_level'], format=log_format)
        if log_file:
            configure_logger('deathclock', log_file=log_file,
                             log_format=log_format, log_level=result['log_level'])

    return result
