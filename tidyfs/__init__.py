"""
tidyfs - scan, deduplicate and organize directory trees.
"""

__version__ = "0.1.0"
