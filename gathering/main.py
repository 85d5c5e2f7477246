import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import GROUP_ID, LOG_LEVEL, PORT, TIMEZONE
from .error_handlers import register_error_handlers
from .events_api import router as events_router
from .polls_api import router as polls_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("group %s ready (expiry timezone %s)", GROUP_ID, TIMEZONE)
    yield
    # Shutdown: documents live in memory only, nothing to flush


app = FastAPI(
    title=f"Group RSVP & Polls ({GROUP_ID})",
    lifespan=lifespan,
)

register_error_handlers(app)
app.include_router(events_router)
app.include_router(polls_router)


@app.get("/health")
def health():
    return {"ok": True, "group": GROUP_ID}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gathering.main:app", host="0.0.0.0", port=PORT, log_level=LOG_LEVEL.lower())
