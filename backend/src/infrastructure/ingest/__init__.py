"""Request body ingestion (streaming multipart)"""
