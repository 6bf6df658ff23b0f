"""
Plugin updater - self-update helper for hosted plugin artifacts.

This package checks a remote resource registry for the latest published
version of a plugin, downloads it into a staging directory and swaps it into
the installation directory when the host shuts down.
"""

__version__ = "0.1.0"
