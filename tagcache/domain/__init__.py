"""
Domain Module

Backend-independent cache model: key derivation, tag records and the tag index.
"""
