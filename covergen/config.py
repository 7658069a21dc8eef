# covergen/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str = "*") -> List[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass(frozen=True)
class Config:
    # Runtime
    environment: str
    app_url: str
    app_version: str
    log_level: str
    log_format: str                         # text | json
    log_file: str                           # optional daily-rotated file
    # API / CORS
    allowed_origins: List[str]
    # OpenAI (chat, images, moderation)
    openai_api_key: str
    openai_text_model: str
    openai_moderation_model: str
    # Creative director LLM selection
    llm_provider: str
    # Storage
    storage_mode: str                       # local | r2 | gcs
    local_storage_dir: Path
    r2_account_id: str
    r2_access_key: str
    r2_secret_key: str
    r2_bucket: str
    r2_public_url: str
    gcs_bucket: str
    # Moderation
    enable_content_moderation: bool
    content_moderation_strict: bool
    moderation_bypass_key: str
    # Stripe
    stripe_secret_key: str
    stripe_webhook_secret: str
    # Jobs
    job_dispatch: str                       # inline | cloud_tasks
    gcp_project: str
    gcp_location: str
    tasks_queue: str
    public_base_url: str
    sweep_jobs_on_startup: bool             # optional: run a sweep on app startup
    sweep_ttl_hours: int                    # drop finished jobs older than this
    # Client error log
    error_log_token: str
    # Analytics
    analytics_sample_rate: float            # 0..1 share of events kept

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_config() -> Config:
    return Config(
        environment = os.getenv("ENVIRONMENT", "development"),
        app_url = os.getenv("APP_URL", "http://localhost:8080").rstrip("/"),
        app_version = os.getenv("APP_VERSION", "1.0.0"),
        log_level = os.getenv("LOG_LEVEL", "INFO"),
        log_format = os.getenv("LOG_FORMAT", "text").strip().lower(),
        log_file = os.getenv("LOG_FILE", ""),
        allowed_origins = _env_csv("ALLOWED_ORIGINS", "*"),
        openai_api_key = os.getenv("OPENAI_API_KEY", ""),
        openai_text_model = os.getenv("OPENAI_TEXT_MODEL", "gpt-4o"),
        openai_moderation_model = os.getenv("OPENAI_MODERATION_MODEL", "omni-moderation-latest"),
        llm_provider = os.getenv("LLM_PROVIDER", ""),
        storage_mode = os.getenv("STORAGE_MODE", "local").strip().lower(),
        local_storage_dir = Path(os.getenv("LOCAL_STORAGE_DIR", ".local-storage")),
        r2_account_id = os.getenv("CLOUDFLARE_R2_ACCOUNT_ID", ""),
        r2_access_key = os.getenv("CLOUDFLARE_R2_ACCESS_KEY", ""),
        r2_secret_key = os.getenv("CLOUDFLARE_R2_SECRET_KEY", ""),
        r2_bucket = os.getenv("CLOUDFLARE_R2_BUCKET_NAME", ""),
        r2_public_url = os.getenv("CLOUDFLARE_R2_PUBLIC_URL", "").rstrip("/"),
        gcs_bucket = os.getenv("GCS_BUCKET", ""),
        enable_content_moderation = _env_bool("ENABLE_CONTENT_MODERATION", True),
        content_moderation_strict = _env_bool("CONTENT_MODERATION_STRICT", False),
        moderation_bypass_key = os.getenv("MODERATION_BYPASS_KEY", ""),
        stripe_secret_key = os.getenv("STRIPE_SECRET_KEY", ""),
        stripe_webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET", ""),
        job_dispatch = os.getenv("JOB_DISPATCH", "inline").strip().lower(),
        gcp_project = os.getenv("PROJECT_ID", ""),
        gcp_location = os.getenv("REGION", "us-central1"),
        tasks_queue = os.getenv("TASKS_QUEUE", "cover-worker-queue"),
        public_base_url = os.getenv("BASE_URL", "http://localhost:8080").rstrip("/"),
        sweep_jobs_on_startup = _env_bool("SWEEP_JOBS_ON_STARTUP", False),
        sweep_ttl_hours = _env_int("SWEEP_TTL_HOURS", 24),
        error_log_token = os.getenv("ERROR_LOG_TOKEN", ""),
        analytics_sample_rate = min(1.0, max(0.0, _env_float("ANALYTICS_SAMPLE_RATE", 1.0))),
    )


# Load once
config = load_config()


def stripe_price_id(plan_type: str, billing_cycle: str) -> str:
    """Price ids live in STRIPE_PRICE_<PLAN>_<CYCLE>, e.g. STRIPE_PRICE_PRO_MONTHLY."""
    return os.getenv(f"STRIPE_PRICE_{plan_type.upper()}_{billing_cycle.upper()}", "")


def api_key_for(env_name: str) -> str:
    """Provider keys are looked up by env var name at call time."""
    return os.getenv(env_name, "")
