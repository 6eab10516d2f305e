"""Dotfiles core: config model and file format, templates, local variables, paths and file helpers."""

__version__ = "0.9.0"