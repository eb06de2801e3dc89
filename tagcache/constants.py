"""
tagcache Global Constants

Centralized location for constants shared by the key derivation scheme,
the tag index and the backends.
"""

# Key derivation
KEY_SEPARATOR = "_"
TAG_SUFFIX = "#tag"

# Expiry
NO_EXPIRY = 0

# Backend selectors
MEMORY_BACKEND = "memory"
REDIS_BACKEND = "redis"

# Serializer selectors
JSON_SERIALIZER = "json"
PICKLE_SERIALIZER = "pickle"

# Application Constants
APP_NAME = "tagcache"
APP_VERSION = "0.1.0"
