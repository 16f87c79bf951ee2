"""
Daybook Web API - FastAPI application.

Uses Supabase Auth JWTs for authenticated routes.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from daybook import __version__
from daybook.web.meal_routes import router as meal_router
from daybook.web.task_routes import router as task_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Daybook", version=__version__)


# CORS middleware for the front end dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(task_router, prefix="/api")
app.include_router(meal_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
