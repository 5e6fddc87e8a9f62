#!/usr/bin/env python3
"""
Run the GPS TCP Server without the HTTP API
Usage: python tcp_server/run_server.py [port]
"""
import sys
import os
import asyncio
import logging
import signal
import uuid

# Add parent directory to path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from database.db_conf import init_db
from logs.logconfig import configure_logging
from tcp_server.gps_tcp_server import GPSTrackerTCPServer


async def main():
    """Run the GPS TCP server"""

    # Get port from command line or use configured default
    port = int(sys.argv[1]) if len(sys.argv) > 1 else settings.GPS_TCP_PORT

    configure_logging(session_id_run=str(uuid.uuid4()))
    logger = logging.getLogger(__name__)

    init_db()

    server = GPSTrackerTCPServer(port=port)

    # Set up signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(server.shutdown()))

    logger.info(f"Starting GPS TCP Server on port {port}")
    await server.start()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nServer stopped")
