"""
Adapter layer for the IBCOL portal API.

Contains the storage backend abstraction and its S3 implementation.
"""
