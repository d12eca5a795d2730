"""Content store adapters (local filesystem, S3-compatible)"""
