"""
pubflow - submission workflows and storage-tier publishing jobs.
"""

__version__ = "0.1.0"
