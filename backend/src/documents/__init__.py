"""Document HTTP API (upload, list, download, delete)"""
