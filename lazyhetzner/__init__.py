"""
lazyhetzner - terminal dashboard for Hetzner Cloud projects
"""

__version__ = "0.3.0"
