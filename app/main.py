from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.http_hardening import install_http_hardening
from app.api.error_handlers import install_error_handlers
from app.api.router import router as api_router

app = FastAPI(title=settings.APP_NAME, version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["authorization", "content-type"],
    expose_headers=["X-Request-ID"],
)
install_http_hardening(app)
install_error_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)

@app.get("/", include_in_schema=False)
def landing():
    return JSONResponse({"service": settings.APP_NAME, "env": settings.APP_ENV, "status": "ok"})

@app.get("/health")
def health():
    return {"status": "ok"}
