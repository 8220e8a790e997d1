"""
CLI commands for repo-mirror.
"""
