"""
Convenience entry point for running staffavailability directly.

Usage: python -m staffavailability [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
