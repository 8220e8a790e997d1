"""
Repo Mirror — Keep a destination git remote in step with a source remote.
"""

__version__ = "0.1.0"
