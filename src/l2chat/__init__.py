"""
L2: a terminal chat client for constructed-language design.
"""

__version__ = "0.1.0"
