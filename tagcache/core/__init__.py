"""
Core Module

Configuration, logging setup and value serialization.
"""
