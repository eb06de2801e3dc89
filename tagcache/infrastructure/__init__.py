"""
Infrastructure Module

Concrete cache backends and their connection management.
"""
