#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ServiceMap Application Launcher

Run with ``python -m servicemap_project.run_servicemap --email you@example.com``.
"""

import sys

from servicemap_project.src.main import main

if __name__ == "__main__":
    sys.exit(main())
