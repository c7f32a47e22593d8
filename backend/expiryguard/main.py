# backend/expiryguard/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from expiryguard.api.routes import router as api_router
from expiryguard.api.auth_routes import router as auth_router
from expiryguard.core.config import settings
from expiryguard.core.errors import ExpiryGuardError
from expiryguard.core.logger import configure_logging

configure_logging()

app = FastAPI(title="ExpiryGuard API", version="0.1.0")

# Prefer a comma-separated allowlist in prod (Render), fallback to FRONTEND_URL/local
cors_env = settings.cors_origins.strip()
if cors_env:
    ALLOW_ORIGINS = [o.strip() for o in cors_env.split(",") if o.strip()]
else:
    ALLOW_ORIGINS = list({settings.frontend_url.strip(), "http://localhost:3000"})

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(ExpiryGuardError)
async def expiryguard_error_handler(request: Request, exc: ExpiryGuardError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(api_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}
