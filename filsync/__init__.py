"""
filsync: incremental mirror of Filfox transfer history into a relational store.
"""

__version__ = "0.1.0"
