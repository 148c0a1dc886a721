"""Publish plugin archives to a remote repository and keep its updatePlugins.xml in sync."""

__version__ = "0.4.0"
