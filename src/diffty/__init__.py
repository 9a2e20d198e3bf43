"""diffty.

Tracks human review decisions against the changed files of a two-branch
git comparison and rebuilds per-file review status on every request.
"""

__version__ = "0.3.0"
__author__ = "diffty contributors"

__all__ = []
