import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .settings import settings
from .routers import auth
from .routers import chat
from .routers import dashboard
from .routers import resources

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(title="Smart Librarian API")

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(chat.router)
app.include_router(resources.router)
app.include_router(dashboard.router)


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}
