from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ============================================================
# 🪵 Logging Setup
# ============================================================
logging.basicConfig(
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    level=logging.INFO,
)
logger = logging.getLogger("citeqa.app")

# ============================================================
# 📦 Core Imports (Settings + Dependency Injection)
# ============================================================
from citeqa.config import get_settings
from citeqa.container import build_container

# ============================================================
# 🌐 Routers
# ============================================================
from citeqa.router.health import router as health_router
from citeqa.router.answer import router as answer_router
from citeqa.router import answer as answer_router_module

# ============================================================
# 🚀 Startup / Shutdown Lifecycle
# ============================================================
@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("🚀 Initializing CiteQA API...")
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    try:
        container = build_container(settings)
    except Exception as e:
        logger.error(f"❌ Container init failed: {e}", exc_info=True)
        raise

    answer_router_module.qa_service = container.qa_service
    logger.info("🎯 API is ready and accepting requests")
    try:
        yield
    finally:
        answer_router_module.qa_service = None
        logger.info("🧹 Application shutdown complete")

# ============================================================
# 🌍 FastAPI App Definition
# ============================================================
app = FastAPI(
    title="CiteQA API",
    description="Document question answering with numbered, traceable citations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS Setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(health_router)
app.include_router(answer_router)

# ============================================================
# 🏠 Root Endpoint
# ============================================================
@app.get("/")
def root():
    return {
        "app": "CiteQA API",
        "version": "1.0.0",
        "status": "ok" if answer_router_module.qa_service is not None else "starting",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "answer": "/answer",
            "stream": "/stream",
            "decode": "/decode",
        },
        "examples": {
            "qa": {
                "method": "POST",
                "path": "/answer",
                "body": {"messages": [{"role": "user", "content": "What does the onboarding guide say about VPN access?"}]},
            },
            "decode": {
                "method": "POST",
                "path": "/decode",
                "body": {"text": "VPN access needs a ticket [1].\n\n## Sources\n\n1. [Onboarding Guide](doc://abc123)"},
            },
        },
    }

# ============================================================
# 🏁 Entrypoint
# ============================================================
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting CiteQA API on port 8080...")
    uvicorn.run(
        "citeqa.main:app",
        host="0.0.0.0",
        port=8080,
        reload=False,
        log_config=None
    )
