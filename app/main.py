import logging
import os
import time
from pathlib import Path

import codes
import crud
import database
import errors
import models
import schemas
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

load_dotenv(Path(__file__).parent.parent / ".env")

ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
APP_VERSION = os.getenv("APP_VERSION", "1.0")
STARTED_AT = time.monotonic()

# --- Logging ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("tinylink")

# --- DB tables ---
models.Base.metadata.create_all(bind=database.engine)

app = FastAPI(
    title="TinyLink",
    description="Short links with click counting.",
    version=APP_VERSION,
)

# --- CORS ---
if os.getenv("CORS_ORIGINS"):
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS").split(",") if o.strip()]
elif ENVIRONMENT == "dev":
    origins = ["*"]
else:
    origins = ["https://tinylink-frontend-sable.vercel.app"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(errors.LinkError)
def link_error_handler(request: Request, exc: errors.LinkError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

@app.exception_handler(SQLAlchemyError)
def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


# Health check (useful for uptime monitors & load balancers)
@app.get("/healthz", response_model=schemas.Health)
def healthz():
    return {"ok": True, "version": APP_VERSION, "uptime_seconds": time.monotonic() - STARTED_AT}

# ---------- API ----------
@app.post("/api/links", response_model=schemas.LinkOut, status_code=201)
def create_link(link_in: schemas.LinkCreate, db=Depends(database.get_db)):
    return crud.create_link(db, link_in.target_url, link_in.code)

@app.get("/api/links", response_model=list[schemas.LinkOut])
def list_links(db=Depends(database.get_db)):
    return crud.get_links(db)

@app.get("/api/links/{code}", response_model=schemas.LinkOut)
def get_link(code: str, db=Depends(database.get_db)):
    link = crud.get_link(db, code)
    if not link:
        raise errors.NotFound()
    return link

@app.delete("/api/links/{code}", status_code=204, response_class=Response)
def delete_link(code: str, db=Depends(database.get_db)):
    if not crud.delete_link(db, code):
        raise errors.NotFound()
    logger.info("Deleted link %s", code)
    return Response(status_code=204)

# Registered last so it never shadows the routes above
@app.get("/{code}", include_in_schema=False)
def redirect(code: str, db=Depends(database.get_db)):
    if not codes.is_valid_code(code):
        raise errors.NotFound()
    target_url = crud.resolve_and_record_click(db, code)
    return RedirectResponse(url=target_url, status_code=302)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 4000)))
