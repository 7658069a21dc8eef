# covergen/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from covergen.config import config
from covergen.lib.cleanup import sweep_finished_jobs
from covergen.lib.jobs import jobs
from covergen.lib.responses import register_exception_handlers
from covergen.logger import configure_logging, get_logger

from covergen.features.account.router import router as account_router
from covergen.features.analytics.router import router as analytics_router
from covergen.features.admin.router import router as admin_router
from covergen.features.cache.router import router as cache_router
from covergen.features.community.router import router as community_router
from covergen.features.debug.router import router as debug_router
from covergen.features.errors_log.router import router as errors_log_router
from covergen.features.generate.router import router as generate_router
from covergen.features.health.router import router as health_router
from covergen.features.models.router import router as models_router
from covergen.features.moderate.router import router as moderate_router
from covergen.features.payment.router import router as payment_router
from covergen.features.platforms.router import router as platforms_router
from covergen.features.storage.router import router as storage_router
from covergen.features.templates.router import router as templates_router
from covergen.features.users.router import router as users_router
from covergen.features.visual_styles.router import router as visual_styles_router

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if config.sweep_jobs_on_startup:
        removed = sweep_finished_jobs(jobs, ttl_hours=config.sweep_ttl_hours)
        log.info(f"startup sweep removed {removed} job(s)")
    log.info(f"covergen {config.app_version} up ({config.environment}, storage={config.storage_mode})")
    yield


app = FastAPI(title="Cover Generator API", version=config.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins,
    # credentials cannot be combined with a wildcard origin
    allow_credentials="*" not in config.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(platforms_router)
app.include_router(templates_router)
app.include_router(visual_styles_router)
app.include_router(models_router)
app.include_router(generate_router)
app.include_router(moderate_router)
app.include_router(cache_router)
app.include_router(storage_router)
app.include_router(payment_router)
app.include_router(account_router)
app.include_router(community_router)
app.include_router(users_router)
app.include_router(errors_log_router)
app.include_router(analytics_router)
app.include_router(debug_router)
app.include_router(admin_router)
