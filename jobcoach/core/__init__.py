"""
Core package: configuration, errors and key-value storage.
"""
