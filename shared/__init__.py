"""
Shared Kernel

Building blocks used by every app: value objects, the list query builder
and its ORM translation, and the API layer glue (request context, error
envelope, permissions and list/projection mixins).
"""
