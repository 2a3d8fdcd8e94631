"""
KC Notes - credential and session management for a multi-user notes service.
"""

__version__ = "1.0.0"
