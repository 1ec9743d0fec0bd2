"""
Report package: renderings of contributor summaries.
"""

from .renderer import render, FORMATS

__all__ = ["render", "FORMATS"]
