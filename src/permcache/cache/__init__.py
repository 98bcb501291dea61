"""Permission cache bounded context.

Caches permission checks in front of a remote authorization service and
buffers relationship writes for batched delivery.
"""
