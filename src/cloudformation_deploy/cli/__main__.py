#!/usr/bin/env python3
"""Main CLI entry point."""

from .cloudformation import main

if __name__ == "__main__":
    main()
