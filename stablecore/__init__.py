"""
stablecore - domain core for shared stable management.

Stables, members, paddocks and the care schedule, behind a single
validated write path.
"""

__version__ = "0.1.0"
