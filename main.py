#!/usr/bin/env python3
"""
Folder Queue Publisher - Main Application Entry Point

This application watches a configurable source folder for files, publishes
their content to a message queue, and moves published files into a target
folder that mirrors the source folder structure.
"""

import sys

from folder_publisher.cli import main


if __name__ == "__main__":
    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nApplication stopped by user.")
        sys.exit(0)
    except Exception as e:
        print(f"Application failed to start: {e}")
        sys.exit(1)
