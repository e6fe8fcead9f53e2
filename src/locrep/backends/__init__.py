"""Backends for locrep output generation (DOT diagrams)."""

from .dot_generator import generate_dot, save_dot_file

__all__ = ["generate_dot", "save_dot_file"]
