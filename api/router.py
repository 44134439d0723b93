"""
API Router

Aggregates the endpoint routers. Routes sit at the site root, without a
version prefix.

@.architecture
Incoming: app.py, api/endpoints/*.py --- {app.include_router() call, endpoint router instances}
Processing: api_router.include_router() --- {1 job: router_aggregation}
Outgoing: app.py --- {APIRouter, HTTP request routing to endpoints}
"""

from fastapi import APIRouter

from .endpoints import files_router, images_router

api_router = APIRouter()

# Upload, listing, download, deletion
api_router.include_router(files_router)

# Image listing and inline view
api_router.include_router(images_router)
