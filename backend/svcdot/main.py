from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from svcdot import __version__
from svcdot.api.routes import router
from svcdot.config import CORS_ORIGINS

app = FastAPI(
    title="SMF Dependency Graph",
    version=__version__,
)

# Middleware FIRST
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Routes AFTER middleware
app.include_router(router)
