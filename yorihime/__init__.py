"""
Yorihime: a terminal trainer that edits score, lives and bombs of running
Touhou Project games.
"""

__version__ = "0.1.0"
