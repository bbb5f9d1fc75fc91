"""
Embedded HTTP server.
=====================
Serves an assembled output directory on localhost so the browser-based
assessments load pages over HTTP rather than file://.
"""
import asyncio
import functools
import os
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import quote


class SiteRequestHandler(SimpleHTTPRequestHandler):
    """Static handler for generated sites; request logging is silenced."""

    def log_message(self, format, *args):
        pass


class HTTPServerContext:
    """
    Serves `directory` for the duration of a `with` or `async with` block.

    The OS assigns the port (bind to 0), so concurrent assessments of
    different projects never collide.
    """

    def __init__(self, directory: str, host: str = "127.0.0.1"):
        self.directory = os.path.abspath(directory)
        self.host = host
        self.server = None
        self.thread = None

    def __enter__(self):
        handler = functools.partial(SiteRequestHandler, directory=self.directory)
        self.server = ThreadingHTTPServer((self.host, 0), handler)
        self.thread = threading.Thread(target=self.server.serve_forever, name="sitegen-http", daemon=True)
        self.thread.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.server is not None:
            self.server.shutdown()
            self.server.server_close()
            self.thread.join(timeout=5)
            self.server = None
        return False

    async def __aenter__(self):
        return await asyncio.to_thread(self.__enter__)

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # shutdown() waits out the serve_forever poll interval; keep it off the loop
        return await asyncio.to_thread(self.__exit__, exc_type, exc_val, exc_tb)

    @property
    def port(self) -> int:
        return self.server.server_address[1]

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def url_for(self, filename: str) -> str:
        return f"{self.base_url}/{quote(filename)}"
