import logging
import uuid
import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.commands import router as commands_router
from api.gps_tcp_status import router as gps_tcp_status_router
from config import settings
from database.db_conf import init_db, test_db_connection
from logs.logconfig import configure_logging


def check_database_connection():
    """
    Check if the database connection is working.
    Returns (success, message) tuple.
    """
    return test_db_connection(max_retries=3)


@asynccontextmanager
async def lifespan(app):
    # Check database connection first
    is_connected, message = check_database_connection()
    if not is_connected:
        logger.critical(f"Failed to connect to database: {message}")
        raise RuntimeError(f"Database connection check failed: {message}")
    logger.info(f"Database connection check: {message}")
    init_db()

    # Start GPS TCP Server if enabled
    tcp_server = None
    tcp_server_task = None
    if settings.GPS_TCP_ENABLED:
        from tcp_server.gps_tcp_server import GPSTrackerTCPServer
        tcp_server = GPSTrackerTCPServer(host=settings.GPS_TCP_HOST, port=settings.GPS_TCP_PORT)
        tcp_server_task = asyncio.create_task(tcp_server.start())
        app.state.tcp_server = tcp_server
        logger.info(f"GPS TCP Server starting on port {settings.GPS_TCP_PORT}")
    else:
        app.state.tcp_server = None
        logger.info("GPS TCP Server is disabled in configuration")

    # Yield control back to FastAPI
    yield

    logger.info("Starting application shutdown...")

    if tcp_server_task:
        try:
            await tcp_server.shutdown()
        except Exception as e:
            logger.error(f"Error stopping GPS TCP Server: {e}")

        tcp_server_task.cancel()
        try:
            await tcp_server_task
        except asyncio.CancelledError:
            pass
        except OSError as e:
            # Bind failures surface here when the task is awaited
            logger.error(f"GPS TCP Server exited with error: {e}")

    logger.info("Application shutdown completed")


session_id_run = str(uuid.uuid4())

# Initialize logging at the start of your application
configure_logging(session_id_run=session_id_run)

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(commands_router)
app.include_router(gps_tcp_status_router)


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.APP_NAME}


if __name__ == "__main__":
    uvicorn.run("app:app", host="0.0.0.0", port=8000)
