"""
markerbridge: Server Handle
==============================

What:  An explicit, stoppable server built from Settings and a sink.
How:   BridgeServer binds the listening socket itself, then hands it to a
       uvicorn.Server. Binding first lets a taken port be reported as a
       single log line instead of a uvicorn exit.

Usage:
    server = BridgeServer(settings, sink)
    server.serve()            # blocking, returns False if the bind failed

    server = BridgeServer(settings, sink)
    server.start()            # background thread, returns once accepting
    ...
    server.stop()

Bind outcome is logged the same way in both modes:
    Server is listening on port 3000
    Server startup error: [Errno 98] Address already in use
"""

import logging
import socket
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI

from markerbridge.config import Settings
from markerbridge.exceptions import ServerStartupError
from markerbridge.main import create_app
from markerbridge.services.sink_base import EmitSink

logger = logging.getLogger(__name__)


class BridgeServer:
    """
    Owns one listening socket and one uvicorn server.

    Attributes:
        settings:       Settings the app was built from
        app:            The FastAPI application being served
        startup_error:  OSError from a failed bind, else None
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sink: Optional[EmitSink] = None,
        app: Optional[FastAPI] = None,
    ):
        self.settings = settings or Settings()
        self.app = app or create_app(self.settings, sink)
        self.startup_error: Optional[OSError] = None
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        """The bound port (differs from settings.port when that is 0)."""
        if self._socket is not None:
            return self._socket.getsockname()[1]
        return self.settings.port

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    def bind(self) -> bool:
        """Bind the listening socket. Logs and returns False on failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.settings.host, self.settings.port))
        except OSError as e:
            sock.close()
            self.startup_error = e
            logger.error("Server startup error: %s", e)
            return False

        self._socket = sock
        logger.info("Server is listening on port %d", self.port)
        return True

    def _build_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            self.app,
            lifespan="on",
            log_config=None,
            access_log=False,
        )
        return uvicorn.Server(config)

    def serve(self) -> bool:
        """
        Bind and serve until stopped (Ctrl+C or stop() from another thread).

        Returns: False when the bind failed, True after a normal shutdown.
        """
        if not self.bind():
            return False
        self._server = self._build_server()
        try:
            self._server.run(sockets=[self._socket])
        finally:
            self._close_socket()
        return True

    def start(self, timeout: float = 10.0) -> None:
        """
        Serve in a daemon thread and wait until connections are accepted.

        Raises:
            ServerStartupError: The bind failed or uvicorn did not start in time.
        """
        if not self.bind():
            raise ServerStartupError(str(self.startup_error))

        self._server = self._build_server()
        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [self._socket]},
            name="markerbridge-server",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self.stop()
                raise ServerStartupError("server did not start")
            time.sleep(0.01)

    def stop(self, timeout: float = 10.0) -> None:
        """Ask the server to exit and wait for the thread to finish."""
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self._close_socket()

    def _close_socket(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
