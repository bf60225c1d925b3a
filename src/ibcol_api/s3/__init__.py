"""Thin boto3 helpers for the S3 bucket, one module per CRUD verb."""
