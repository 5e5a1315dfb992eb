"""
Core modules for the Greenspace Coverage Analysis tool.

This package contains the tabular and pipeline modules of the tool.

Modules:
    exceptions: Error taxonomy shared by every package
    aggregation: Group-by count/sum over attribute tables
    joins: Exact-key left joins and anti-join diagnostics
    analysis: Greenspace-by-region and station coverage summaries
"""

__version__ = '1.0.0'
