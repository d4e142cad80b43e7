"""
Convenience entry point for running cabinbooking as a module.

Usage: python -m cabinbooking [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
