"""
LMGHI API

Volunteer intake pipeline and admin review surface for the LMGHI website.
"""

__version__ = "0.1.0"
