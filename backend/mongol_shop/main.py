import logging
import sys
import uuid
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from mongol_shop.config import settings
from mongol_shop.database import engine
from mongol_shop.routers import admin_users, auth, products, profile
from mongol_shop.services.errors import ShopError
from mongol_shop.utils.logger import logger

# Global logging configuration
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,
)

app = FastAPI(title="Mongol Shop API", version="1.0.0")

origins = settings.allowed_origins
if settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
    max_age=3600,
)


# Request logging middleware with request ID
@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = uuid.uuid4().hex[:8]
    request.state.rid = rid
    logger.info("→ %s %s rid=%s", request.method, request.url.path, rid)
    try:
        resp = await call_next(request)
        logger.info("← %s status=%s rid=%s", request.url.path, resp.status_code, rid)
        resp.headers["X-Request-ID"] = rid
        return resp
    except Exception as e:
        logger.exception("Unhandled error rid=%s: %s", rid, str(e))
        error_resp = JSONResponse(
            {"error": "internal_error", "rid": rid, "message": str(e), "type": type(e).__name__},
            status_code=500
        )
        error_resp.headers["X-Request-ID"] = rid
        return error_resp


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    rid = getattr(request.state, "rid", "unknown")
    logger.warning("%s on %s %s rid=%s: %s", type(exc).__name__, request.method, request.url.path, rid, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers={"X-Request-ID": rid})


app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(admin_users.router)
app.include_router(products.router)


@app.get("/")
def read_root():
    return {"message": "Mongol Shop API"}


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/healthz/db")
def healthz_db():
    """Database health check endpoint"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return {"status": "ok", "database": "connected"}
    except SQLAlchemyError as e:
        logger.exception("Database health check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database unavailable: {type(e).__name__}: {str(e)}",
        )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mongol_shop.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
