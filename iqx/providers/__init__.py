"""
Data providers for IQX.
"""
