"""
Service Layer - Business Rules

Services own the database transaction for multi-step operations
(checkout, payment settlement, review moderation).
"""
