from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Fresh Breeze Basket API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend / CORS (auto-built below)
    # -------------------------------------------------
    CORS_ORIGIN: Optional[str] = Field(None, env="CORS_ORIGIN")
    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Multi-tenancy
    # -------------------------------------------------
    TENANT_BASE_DOMAIN: str = Field("gofreshco.com", env="TENANT_BASE_DOMAIN")
    DEFAULT_COMPANY_SLUG: str = Field("default", env="DEFAULT_COMPANY_SLUG")

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # Stripe Payment Processing
    # -------------------------------------------------
    STRIPE_SECRET_KEY: Optional[str] = Field(None, env="STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(None, env="STRIPE_WEBHOOK_SECRET")

    # -------------------------------------------------
    # Cloudflare R2 (S3-compatible image storage)
    # -------------------------------------------------
    R2_ACCOUNT_ID: Optional[str] = Field(None, env="R2_ACCOUNT_ID")
    R2_ACCESS_KEY_ID: Optional[str] = Field(None, env="R2_ACCESS_KEY_ID")
    R2_SECRET_ACCESS_KEY: Optional[str] = Field(None, env="R2_SECRET_ACCESS_KEY")
    R2_BUCKET_NAME: Optional[str] = Field(None, env="R2_BUCKET_NAME")
    R2_PUBLIC_URL: Optional[str] = Field(None, env="R2_PUBLIC_URL")

    # -------------------------------------------------
    # Caching + Rate limits
    # -------------------------------------------------
    ROLE_CACHE_TTL_SECONDS: int = Field(300, env="ROLE_CACHE_TTL_SECONDS", description="How long resolved user roles are cached (default: 5 minutes)")
    PERMISSION_CACHE_TTL_SECONDS: int = Field(300, env="PERMISSION_CACHE_TTL_SECONDS", description="How long permission/module lookups are cached (default: 5 minutes)")
    AUTH_RATE_LIMIT_MAX: int = Field(100, env="AUTH_RATE_LIMIT_MAX")
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = Field(900, env="AUTH_RATE_LIMIT_WINDOW_SECONDS")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) explicit frontend origin
if settings.CORS_ORIGIN:
    origin = settings.CORS_ORIGIN
    if not origin.startswith("http"):
        origin = f"https://{origin}"
    cors_origins.append(origin.rstrip("/"))

# 2) tenant subdomains are matched by regex in main.py; add the bare domains here
cors_origins.append(f"https://{settings.TENANT_BASE_DOMAIN}")
cors_origins.append(f"https://www.{settings.TENANT_BASE_DOMAIN}")
cors_origins.extend([d.rstrip("/") for d in settings.FRONTEND_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
