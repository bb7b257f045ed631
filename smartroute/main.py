from contextlib import asynccontextmanager

from fastapi import FastAPI
from smartroute.api import directions
from smartroute.api import places
from smartroute.api import user_data
from smartroute.api.deps import kakao_client, weather_provider
from smartroute.core.config import settings
from smartroute.db.supabase_client import init_supabase, is_connected
from fastapi.middleware.cors import CORSMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_supabase()
    yield


app = FastAPI(title="SmartRoute API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(places.router)
app.include_router(directions.router)
app.include_router(user_data.router)


@app.get("/")
def read_root():
    return {
        "message": "SmartRoute API is running.",
        "status": "healthy",
        "version": "0.1.0"
    }


@app.get("/api/health")
def health():
    """Which providers are live; anything false is served from fallbacks."""
    return {
        "status": "ok",
        "kakao": kakao_client.configured,
        "weather": bool(weather_provider.api_key),
        "storage": is_connected(),
    }
