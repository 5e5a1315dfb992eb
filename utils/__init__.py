"""
Utility modules for the Greenspace Coverage Analysis tool.

This package contains helpers used throughout the application.

Modules:
    logger: Logging configuration and setup
    units: Unit-tagged area and distance measurements
"""

__version__ = '1.0.0'
