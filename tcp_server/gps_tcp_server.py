"""
SeTracker GPS watch TCP Server
One asyncio protocol per device connection, CRLF delimited frames
"""
import asyncio
import logging
import socket
import struct
import time
import traceback
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple
from config import settings
from tcp_server.message_service import MessageService

logger = logging.getLogger(__name__)

FRAME_DELIMITER = b'\r\n'
LOCAL_PEERS = ('127.0.0.1', 'localhost', '::1')


class GPSClientProtocol(asyncio.Protocol):
    """Handle an individual tracker connection"""

    def __init__(self, server):
        self.server = server
        self.transport = None
        self.device_id = None
        self.buffer = b""
        self.peername = None
        self.conn_id = None
        self.connected = False
        self.last_activity = time.time()
        self.message_count = 0
        self.timeout_task = None
        # Complete frames waiting for the worker; None stops it
        self.frames: asyncio.Queue = asyncio.Queue()
        self.worker_task = None

    def connection_made(self, transport):
        """Handle new connection"""
        self.transport = transport
        self.peername = transport.get_extra_info('peername')
        self.conn_id = f"{self.peername}_{time.time()}"

        if len(self.server.active_connections) >= self.server.max_connections:
            logger.warning(f"Max connections reached, rejecting {self.peername}")
            transport.close()
            return

        self.server.active_connections[self.conn_id] = self
        self.connected = True

        # Keep idle device links open, push small replies out immediately
        # and give queued replies time to flush on close
        sock = transport.get_extra_info('socket')
        if sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            if self.server.so_linger:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack('ii', 1, self.server.so_linger))

        if self.peername and self.peername[0] not in LOCAL_PEERS:
            logger.info(f"GPS tracker connected from {self.peername} (total: {len(self.server.active_connections)})")
        else:
            logger.debug(f"Local connection from {self.peername}")

        self.worker_task = asyncio.ensure_future(self._process_frames())
        if self.server.connection_timeout:
            self.timeout_task = asyncio.ensure_future(self._monitor_timeout())

    def connection_lost(self, exc):
        """Handle connection loss"""
        if exc:
            logger.info(f"GPS tracker disconnected from {self.peername}: {exc}")
        else:
            logger.info(f"GPS tracker disconnected from {self.peername}")

        self.connected = False
        if self.timeout_task:
            self.timeout_task.cancel()

        # Frames already received are still processed and stored
        self.frames.put_nowait(None)

        self.server.active_connections.pop(self.conn_id, None)
        if self.device_id:
            self.server.unregister_device(self.device_id, self)

    def data_received(self, data):
        """Buffer incoming bytes and queue every complete frame in order"""
        self.last_activity = time.time()
        self.buffer += data

        while True:
            pos = self.buffer.find(FRAME_DELIMITER)
            if pos == -1:
                break
            self.frames.put_nowait(self.buffer[:pos])
            self.buffer = self.buffer[pos + len(FRAME_DELIMITER):]

        # Only an unterminated frame counts against the limit
        if len(self.buffer) > self.server.max_buffer_size:
            logger.warning(f"Buffer overflow from {self.peername} ({len(self.buffer)} bytes without delimiter), closing connection")
            self.buffer = b""
            self.transport.close()

    async def _process_frames(self):
        """Process queued frames one at a time, in arrival order"""
        while True:
            frame = await self.frames.get()
            try:
                if frame is None:
                    break
                await self.process_frame(frame)
            finally:
                self.frames.task_done()

    def _decode(self, frame: bytes) -> str:
        try:
            return frame.decode('utf-8').strip()
        except UnicodeDecodeError as e:
            logger.warning(f"Dropping invalid UTF-8 bytes from {self.peername} at offset {e.start}: {frame[:200]!r}")
            return frame.decode('utf-8', errors='ignore').strip()

    async def process_frame(self, frame: bytes):
        """Process a complete frame; never lets an error close the connection"""
        try:
            text = self._decode(frame)
            if not text:
                return

            self.message_count += 1
            self.server.stats['messages_received'] += 1

            # Store commits block, so they run outside the event loop
            result = await asyncio.to_thread(self.server.message_service.handle_frame, text)
            if result is None:
                self.server.stats['parse_errors'] += 1
                return

            device_id = result.message.device_id
            if self.connected and self.device_id != device_id:
                if self.device_id:
                    logger.warning(f"Device ID changed on connection {self.conn_id}: {self.device_id} -> {device_id}")
                    self.server.unregister_device(self.device_id, self)
                self.device_id = device_id
                self.server.register_device(device_id, self)

            if result.reply:
                self.write(result.reply)

        except Exception as e:
            self.server.stats['errors'] += 1
            logger.error(f"Error processing message: {e}\n{traceback.format_exc()}")

    def write(self, frame: str) -> bool:
        if not self.transport or self.transport.is_closing():
            return False
        self.transport.write(frame.encode('utf-8') + FRAME_DELIMITER)
        logger.debug(f"Sent to {self.peername}: {frame}")
        return True

    async def _monitor_timeout(self):
        """Close the connection after a period without data"""
        try:
            while True:
                await asyncio.sleep(min(30, self.server.connection_timeout))

                if time.time() - self.last_activity > self.server.connection_timeout:
                    logger.warning(f"Connection timeout for {self.peername}")
                    if self.transport and not self.transport.is_closing():
                        self.transport.close()
                    break

        except asyncio.CancelledError:
            pass


class GPSTrackerTCPServer:
    """TCP server for SeTracker watches; also the outbound transport"""

    def __init__(self, host: str = None, port: int = None, store=None,
                 max_connections: int = None, connection_timeout: int = None,
                 max_buffer_size: int = None, so_linger: Optional[int] = None):
        self.host = host or settings.GPS_TCP_HOST
        self.port = port if port is not None else settings.GPS_TCP_PORT
        self.max_connections = max_connections or settings.GPS_TCP_MAX_CONNECTIONS
        self.connection_timeout = (connection_timeout if connection_timeout is not None
                                   else settings.GPS_TCP_CONNECTION_TIMEOUT)
        self.max_buffer_size = max_buffer_size or settings.GPS_TCP_MAX_BUFFER_SIZE
        self.so_linger = so_linger if so_linger is not None else settings.GPS_TCP_SO_LINGER

        if store is None:
            from database.store import SQLAlchemyStore
            store = SQLAlchemyStore()
        self.message_service = MessageService(store, transport=self)

        self.server = None
        self.active_connections: Dict[str, GPSClientProtocol] = {}
        self.devices: Dict[str, GPSClientProtocol] = {}
        self.stats = {
            'start_time': None,
            'messages_received': 0,
            'parse_errors': 0,
            'errors': 0,
            'commands_sent': 0,
        }
        self.shutdown_event = asyncio.Event()

    async def start(self):
        """Start listening and serve until shutdown() is called"""
        self.stats['start_time'] = datetime.now()

        loop = asyncio.get_running_loop()
        self.server = await loop.create_server(
            lambda: GPSClientProtocol(self),
            self.host,
            self.port,
            reuse_address=True,
        )

        logger.info(f"GPS TCP Server started on {self.host}:{self.port}")
        logger.info(f"Configuration:")
        logger.info(f"  - Max connections: {self.max_connections}")
        logger.info(f"  - Connection timeout: {self.connection_timeout}s")
        logger.info(f"  - Max buffer size: {self.max_buffer_size} bytes")

        async with self.server:
            await self.shutdown_event.wait()

    async def shutdown(self):
        """Graceful shutdown"""
        logger.info("Shutting down GPS TCP Server...")

        for conn in list(self.active_connections.values()):
            if conn.transport and not conn.transport.is_closing():
                conn.transport.close()

        if self.server:
            self.server.close()
            await self.server.wait_closed()

        self.shutdown_event.set()
        logger.info("GPS TCP Server stopped")

    def register_device(self, device_id: str, conn: GPSClientProtocol):
        previous = self.devices.get(device_id)
        if previous is not None and previous is not conn:
            logger.info(f"Device {device_id} reconnected, replacing previous connection")
        self.devices[device_id] = conn

    def unregister_device(self, device_id: str, conn: GPSClientProtocol):
        # A newer connection for the same device may already be registered
        if self.devices.get(device_id) is conn:
            del self.devices[device_id]

    def is_connected(self, device_id: str) -> bool:
        conn = self.devices.get(device_id)
        return conn is not None and conn.transport is not None and not conn.transport.is_closing()

    def send(self, device_id: str, frame: str) -> bool:
        """Write a frame to the device's live connection, if there is one"""
        conn = self.devices.get(device_id)
        if conn is None:
            return False
        sent = conn.write(frame)
        if sent:
            self.stats['commands_sent'] += 1
        return sent

    def send_command(self, device_id: str, command: str, content: str = "") -> Tuple[str, bool]:
        return self.message_service.send_command(device_id, command, content)

    def is_running(self) -> bool:
        return self.server is not None and self.server.is_serving()

    def get_status(self):
        """Get detailed server status"""
        uptime = datetime.now() - self.stats['start_time'] if self.stats['start_time'] else timedelta(0)

        return {
            'running': self.is_running(),
            'host': self.host,
            'port': self.port,
            'uptime': str(uptime),
            'active_connections': len(self.active_connections),
            'connected_devices': sorted(self.devices.keys()),
            'total_messages': self.stats['messages_received'],
            'parse_errors': self.stats['parse_errors'],
            'errors': self.stats['errors'],
            'commands_sent': self.stats['commands_sent'],
            'connections': [
                {
                    'id': conn_id,
                    'device_id': conn.device_id,
                    'peername': str(conn.peername),
                    'messages': conn.message_count,
                    'last_activity': datetime.fromtimestamp(conn.last_activity).isoformat()
                }
                for conn_id, conn in self.active_connections.items()
            ]
        }
