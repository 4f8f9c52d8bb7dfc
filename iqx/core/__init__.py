"""
Core module - configuration, database, logging and exceptions.
"""
