"""servicemap_project package

The application code lives under ``servicemap_project.src``; this
top-level package only carries the launcher (``run_servicemap``).
"""
