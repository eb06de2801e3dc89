"""
Services Module

Public cache facade.
"""
