"""API route aggregation.

All sub-routers are collected into a single api_router that the
app factory mounts under the configured prefix.
"""

from fastapi import APIRouter

from src.api.routes import content, health, posts

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(content.router)
api_router.include_router(posts.router)
