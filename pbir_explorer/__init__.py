"""Bookmark, page and visual resolution for PBIR report projects."""

__version__ = '0.3.0'
