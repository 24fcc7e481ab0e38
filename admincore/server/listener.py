"""HTTP listener service that runs a WSGI application."""

from __future__ import annotations

import dataclasses
import logging
import ssl
import threading
from collections.abc import Callable, Iterable
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

from admincore.server.manager import Runnable

_log = logging.getLogger(__name__)

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]


def _ok_app(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
    start_response("200 OK", [])
    return [b""]


def _single_path_app(path: str) -> WSGIApp:
    def app(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "") == path:
            start_response("200 OK", [])
            return [b""]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"404 page not found\n"]

    return app


@dataclasses.dataclass
class _Options:
    addr: str = ":8080"
    cert_file: str = ""
    key_file: str = ""
    handler: WSGIApp = _ok_app
    started_hook: Callable[[], None] | None = None
    end_hook: Callable[[], None] | None = None


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        _log.debug(format, *args)


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


def _split_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"address {addr!r} has no port")
    return host.strip("[]") or "0.0.0.0", int(port or 0)


class ListenerServer(Runnable):
    """Serves a WSGI application over HTTP, or HTTPS given a certificate and key.

    Options: ``addr``, ``handler``, ``cert_file``, ``key_file``,
    ``started_hook`` and ``end_hook``.
    """

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name
        self._opts = _Options()
        self._httpd: _ThreadingWSGIServer | None = None
        self._started = False
        self._closed = False
        self._lock = threading.Lock()
        self.options(**kwargs)

    def options(self, **kwargs: Any) -> None:
        """Change options; unknown names raise TypeError."""
        self._opts = dataclasses.replace(self._opts, **kwargs)

    @property
    def addr(self) -> str:
        """The configured listening address."""
        return self._opts.addr

    @property
    def address(self) -> tuple[str, int] | None:
        """The bound (host, port) once started."""
        if self._httpd is None:
            return None
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def start(self, stop: threading.Event) -> None:
        """Bind, serve in the background and return; serving ends when ``stop`` is set."""
        host, port = _split_addr(self._opts.addr)
        httpd = _ThreadingWSGIServer((host, port), _QuietHandler)
        try:
            httpd.set_app(self._opts.handler)
            if self._opts.cert_file and self._opts.key_file:
                context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
                context.load_cert_chain(self._opts.cert_file, self._opts.key_file)
                httpd.socket = context.wrap_socket(httpd.socket, server_side=True)
        except BaseException:
            httpd.server_close()
            raise
        self._httpd = httpd
        self._started = True
        self._closed = False
        bound_host, bound_port = self.address or (host, port)
        _log.info("%s Server listening on %s:%s", self.name, bound_host, bound_port)

        def serve() -> None:
            try:
                httpd.serve_forever(poll_interval=0.1)
            except Exception as exc:  # noqa: BLE001 - logged like a failed serve
                _log.error("%s Server start error: %s", self.name, exc)

        def watch() -> None:
            stop.wait()
            try:
                self.shutdown()
            except Exception as exc:  # noqa: BLE001 - logged on shutdown failure
                _log.error("%s Server shutdown error: %s", self.name, exc)

        threading.Thread(target=serve, name=f"{self.name}-serve", daemon=True).start()
        threading.Thread(target=watch, name=f"{self.name}-watch", daemon=True).start()
        if self._opts.started_hook is not None:
            self._opts.started_hook()

    def attempt(self) -> bool:
        """True until the server has been started."""
        return not self._started

    def shutdown(self) -> None:
        """Stop serving and run the end hook; later calls do nothing."""
        with self._lock:
            if self._httpd is None:
                raise RuntimeError(f"{self.name} server not started")
            if self._closed:
                return
            self._closed = True
            self._httpd.shutdown()
            self._httpd.server_close()
        if self._opts.end_hook is not None:
            self._opts.end_hook()


def new_listener(name: str, **kwargs: Any) -> ListenerServer:
    """A listener serving ``handler`` (a plain 200 reply by default) on :8080."""
    return ListenerServer(name, **kwargs)


def new_healthz(**kwargs: Any) -> ListenerServer:
    """A health-check listener answering 200 on /healthz, on :4000 by default."""
    server = ListenerServer("healthz", addr=":4000", handler=_single_path_app("/healthz"))
    server.options(**kwargs)
    return server


def new_readyz(**kwargs: Any) -> ListenerServer:
    """A readiness listener answering 200 on /readyz, on :2000 by default."""
    server = ListenerServer("readyz", addr=":2000", handler=_single_path_app("/readyz"))
    server.options(**kwargs)
    return server