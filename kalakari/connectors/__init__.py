"""
External service connectors
"""
