#!/usr/bin/env python3
"""
Entry point for running mysql_pg_converter as a module.
This file enables: python -m mysql_pg_converter
"""

from .main import main

if __name__ == '__main__':
    main()
