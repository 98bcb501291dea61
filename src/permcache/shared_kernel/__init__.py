"""Shared Kernel module.

Foundational components shared by the cache context and the infrastructure
layer: relationship tuple types, the authorization client protocol, the
SpiceDB adapter and observation context.

Changes here affect every consumer and should be carefully coordinated.
"""
