from fastapi import APIRouter

from marketjobs.api.routes import auth, bids, health, jobs, search

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(search.router, prefix="/all-jobs", tags=["public"])
api_router.include_router(jobs.router, prefix="/market-jobs", tags=["jobs"])
api_router.include_router(bids.router, prefix="/market-bids", tags=["bids"])
