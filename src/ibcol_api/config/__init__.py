"""
Configuration management for the IBCOL portal API.

Contains Pydantic settings that work across local-dev, aws-mock, and
aws-prod deployment modes.
"""
