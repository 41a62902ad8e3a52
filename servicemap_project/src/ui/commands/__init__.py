"""Undo/redo commands for edits made to the transient shape layer."""
