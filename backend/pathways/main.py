import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .cache import QuestionCache
from .db import init_db
from .errors import PathwaysError
from .settings import settings
from .routers import users, quiz
from .routers import courses, colleges, timeline

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cognitive Pathways API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origin_list,
	allow_credentials=False,
	allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
	allow_headers=["Content-Type", "Authorization"],
)
app.include_router(users.router)
app.include_router(quiz.router)
app.include_router(courses.router)
app.include_router(colleges.router)
app.include_router(timeline.router)

# Not persisted; every category pays one full fetch after a restart
app.state.question_cache = QuestionCache(ttl_seconds=settings.quiz_cache_ttl_seconds)


@app.exception_handler(PathwaysError)
async def pathways_error_handler(request: Request, exc: PathwaysError):
	if exc.status_code >= 500:
		logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
	return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
	errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
	return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request body", "errors": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
	logger.exception("Unhandled error on %s", request.url.path)
	content = {"success": False, "message": "Internal server error"}
	if settings.is_development:
		content["error"] = str(exc)
	return JSONResponse(status_code=500, content=content)


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


@app.get("/metrics", include_in_schema=False)
def metrics():
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.on_event("startup")
async def startup_event():
	init_db()
	logger.info("Database schema ready")
