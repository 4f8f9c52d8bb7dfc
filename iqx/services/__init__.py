"""
Services module - sync pipeline components and read-side queries.
"""
