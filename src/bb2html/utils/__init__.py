#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/utils/__init__.py
"""Escaping, sanitization, smiley and attachment helpers."""
