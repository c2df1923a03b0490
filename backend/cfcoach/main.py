import logging

from fastapi import FastAPI

from .db import Base, engine
from .settings import settings
from .routers import health
from .routers import auth
from .routers import assistant
from .routers import codeforces

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Codeforces Coach API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(assistant.router)
app.include_router(codeforces.router)


@app.get("/info")
def root():
	llm_configured = bool((settings.deepseek_api_key or "").strip()) or bool(settings.openrouter_api_key)
	return {"status": "ok", "llm_configured": llm_configured, "demo_mode": settings.demo_mode}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	if not settings.deepseek_api_key and not settings.openrouter_api_key:
		logger.warning("No chat backend key configured; Codeforces analyses will use template recommendations")
