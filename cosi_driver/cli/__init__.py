"""
Command-line interface for cosi-driver.
"""

from cosi_driver.cli.main import cli

__all__ = ["cli"]
