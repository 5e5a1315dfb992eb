"""
Configuration loading for the Greenspace Coverage Analysis tool.

This module handles loading and validation of the analysis configuration JSON file.

Constants:
    PROJECT_ROOT: Root directory of the project
    CONFIG_DIR: Configuration files directory
    OUTPUT_DIR: Output files directory

Functions:
    load_config: Load and validate analysis configuration from JSON
    load_analysis_settings: Merge analysis settings over defaults
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / 'config'
OUTPUT_DIR = PROJECT_ROOT / 'outputs'

DEFAULT_CONFIG_FILE = CONFIG_DIR / 'analysis_config.json'

DEFAULT_SETTINGS = {
    'working_crs': 27700,
    'buffer_distance': 3000,
    'buffer_join_style': 'round',
    'buffer_resolution': 16,
    'area_unit': 'ha',
    'postcode_api_url': 'https://api.postcodes.io',
    'request_timeout': 30,
}


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict:
    """
    Load analysis configuration from JSON file.

    Reads analysis_config.json (or the given path) and validates basic structure.
    Relative input paths in the 'inputs' section are resolved against the
    directory holding the configuration file.

    Returns:
    --------
    Dict
        Configuration dictionary with 'inputs' and 'settings' keys

    Raises:
    -------
    FileNotFoundError
        If configuration file doesn't exist
    json.JSONDecodeError
        If configuration file contains invalid JSON
    KeyError
        If required configuration keys are missing
    """
    config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config = json.load(f)

    if 'inputs' not in config:
        raise KeyError("Configuration missing required 'inputs' key")
    if 'settings' not in config:
        raise KeyError("Configuration missing required 'settings' key")

    base_dir = config_path.parent
    for source in config['inputs'].values():
        if isinstance(source, dict) and 'path' in source:
            path = Path(source['path'])
            if not path.is_absolute():
                source['path'] = str(base_dir / path)

    return config


def load_analysis_settings(config: Dict = None) -> Dict:
    """
    Load analysis settings from configuration.

    Args:
        config: Configuration dictionary (optional, will load if not provided)

    Returns:
        Dictionary with analysis settings

    Defaults:
        - working_crs: 27700 (British National Grid, metres)
        - buffer_distance: 3000
        - buffer_join_style: 'round'
        - buffer_resolution: 16
        - area_unit: 'ha'
        - postcode_api_url: 'https://api.postcodes.io'
        - request_timeout: 30

    Note:
        Returns defaults for any key missing from the 'settings' section.
    """
    if config is None:
        config = load_config()

    return {**DEFAULT_SETTINGS, **config.get('settings', {})}
