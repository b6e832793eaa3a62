import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tourney.database import init_db
from tourney.errors import StructuralInconsistency, TourneyError
from tourney.routes import competitions, feedback, matches, notifications, teams

load_dotenv()

APP_NAME = "Tourney API"

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TourneyError)
async def tourney_error_handler(request: Request, exc: TourneyError):
    if isinstance(exc, StructuralInconsistency):
        logger.error("Structural inconsistency on %s %s: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include routers
app.include_router(competitions.router, prefix="/api", tags=["competitions"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
app.include_router(matches.router, prefix="/api", tags=["matches"])
app.include_router(feedback.router, prefix="/api", tags=["feedback"])

# Polling fallback for change notifications
app.include_router(notifications.router, prefix="/api", tags=["notifications"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started; %d routes registered", APP_NAME, len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}
