"""
Configuration package for the Greenspace Coverage Analysis tool.

This package contains configuration loading and validation.

Modules:
    config_loader: Load analysis configuration and settings from JSON
"""

__version__ = '1.0.0'
