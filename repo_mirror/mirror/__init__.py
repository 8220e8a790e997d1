"""
Mirror Integration — Clone, refresh and propagate a single branch.

This module provides the command runner, the individual git steps,
and the synchronizer that sequences them against a local workspace.
"""
