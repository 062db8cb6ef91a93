"""In-memory development fixtures and the /api/dev routes"""
