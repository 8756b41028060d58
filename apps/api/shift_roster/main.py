import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shift_roster.core.config import settings
from shift_roster.core.errors import InvalidRequestError, PartialDeploymentError, RosterError
from shift_roster.routers.roster import router as roster_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Shift Roster API")

allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
  """Malformed or missing request fields are a 400 {error}, same as InvalidRequestError."""
  problems = []
  for error in exc.errors():
    loc = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    problems.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
  message = "; ".join(problems) or "invalid request"
  logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
  return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError):
  logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
  return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(PartialDeploymentError)
async def partial_deployment_handler(request: Request, exc: PartialDeploymentError):
  logger.error("%s %s partially done: %s", request.method, request.url.path, exc)
  return JSONResponse(status_code=500, content=exc.to_payload())


@app.exception_handler(RosterError)
async def roster_error_handler(request: Request, exc: RosterError):
  logger.error("%s %s failed: %s", request.method, request.url.path, exc)
  return JSONResponse(status_code=500, content={"error": str(exc)})


app.include_router(roster_router, prefix="/roster/weekly", tags=["roster-weekly"])

@app.get("/health")
def health():
  return {"status": "ok"}
