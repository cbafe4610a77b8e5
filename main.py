# main.py
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from database import check_connection
from errors import register_exception_handlers
from logging_config import setup_logging
from routers import correspondence, expenses, invoices, properties, receipts, reports, tax, tenants
from services.data_source import build_data_source_factory

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
     settings = get_settings()
     setup_logging(settings.log_level, settings.log_format, settings.sql_echo)

     app = FastAPI(title="ProMan API", version="1.0.0")

     # Financial data source, chosen once from DATA_MODE
     app.state.data_source_factory = build_data_source_factory(settings)

     # CORS
     app.add_middleware(
          CORSMiddleware,
          allow_origins=settings.cors_origins,
          allow_credentials=True,
          allow_methods=["*"],
          allow_headers=["*"],
     )

     register_exception_handlers(app)

     for module in (properties, tenants, invoices, receipts, expenses, correspondence, reports, tax):
          app.include_router(module.router)

     @app.get("/api/health", tags=["health"])
     def health():
          database_ok = check_connection()
          return {
               "status": "ok" if database_ok else "degraded",
               "database": "connected" if database_ok else "unavailable",
               "dataMode": settings.data_mode,
          }

     logger.info("API started (environment=%s, data mode=%s)", settings.environment, settings.data_mode)
     return app


app = create_app()

if __name__ == "__main__":
     import os

     from database import init_db

     # Local SQLite databases are created from the models, not migrated
     if get_settings().is_sqlite:
          init_db()

     port = int(os.getenv("PORT", 10000))
     uvicorn.run("main:app", host="0.0.0.0", port=port, reload=get_settings().is_development)
