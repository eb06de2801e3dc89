"""
Cache Domain Module

Value objects, entities, backend interface and the tag index service.
"""
