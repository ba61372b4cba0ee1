# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Main entry point for running ecs_cron as a module."""

from ecs_cron.cli import main

if __name__ == "__main__":
    main()
