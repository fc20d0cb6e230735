"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from stockpulse.api.v1 import crawl, health, posts, stats

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(crawl.router, prefix="/crawl", tags=["crawl"])
api_v1_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_v1_router.include_router(stats.router, prefix="/stats", tags=["stats"])
