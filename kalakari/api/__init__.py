"""
API Layer - FastAPI routers

One router per resource; handlers stay thin and delegate to repositories
and services.
"""
