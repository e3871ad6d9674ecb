"""
Cached client for the Microsoft Translator HTTP service.
"""

__version__ = "1.0.0"
