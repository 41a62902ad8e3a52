"""Geometry helpers for service-area polygons."""
