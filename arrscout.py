#!/usr/bin/env python3
"""
Convenience shim to run arrscout from a source checkout.
Usage: python arrscout.py [--verify|--help|--config PATH] --movie --tmdb ID
"""

from arrscout.cli import main


if __name__ == "__main__":
    main()
