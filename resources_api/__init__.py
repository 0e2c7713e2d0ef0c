"""
Top‑level package for the Resources API.

This file makes ``resources_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``resources_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
