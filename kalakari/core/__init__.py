"""
Core Layer - configuration, database, auth and HTTP middleware
"""
