"""
Pydantic schemas for request bodies and response payloads.
"""
