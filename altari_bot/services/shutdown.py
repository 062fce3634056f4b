from __future__ import annotations

import os
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

import uvicorn


class ShutdownState(str, Enum):
    LISTENING = "LISTENING"
    SHUTTING_DOWN = "SHUTTING_DOWN"
    STOPPED = "STOPPED"


class ShutdownSignal:
    """One-shot shutdown request shared by the webhook route and the controller."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._message: str | None = None

    def trigger(self, message: str) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self._message = message
            self._event.set()
            return True

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> str | None:
        if not self._event.wait(timeout):
            return None
        return self._message


class ShutdownController:
    """Serves the webhook app and exits the process once the signal fires."""

    def __init__(
        self,
        app: Any,
        signal: ShutdownSignal,
        *,
        host: str = "0.0.0.0",
        port: int,
        ssl_certfile: str | None = None,
        ssl_keyfile: str | None = None,
        grace_period_sec: float = 5.0,
        startup_timeout_sec: float = 5.0,
        watch_interval_sec: float = 0.5,
        server_factory: Optional[Callable[[uvicorn.Config], Any]] = None,
        exit_fn: Callable[[int], None] = os._exit,
    ) -> None:
        if (ssl_certfile is None) != (ssl_keyfile is None):
            raise ValueError("TLS mode needs both certificate and key file paths")

        self.app = app
        self.signal = signal
        self.host = host
        self.port = port
        self.ssl_certfile = ssl_certfile
        self.ssl_keyfile = ssl_keyfile
        self.grace_period_sec = grace_period_sec
        self.startup_timeout_sec = startup_timeout_sec
        self.watch_interval_sec = watch_interval_sec
        self._server_factory = server_factory or uvicorn.Server
        self._exit_fn = exit_fn
        self._lock = threading.Lock()
        self._state = ShutdownState.LISTENING
        self.server: Any = None
        self.server_thread: threading.Thread | None = None

    @property
    def tls(self) -> bool:
        return self.ssl_certfile is not None

    @property
    def state(self) -> ShutdownState:
        with self._lock:
            return self._state

    def _set_state(self, state: ShutdownState) -> None:
        with self._lock:
            self._state = state
        print(f"[SHUTDOWN][state] state={state.value}", flush=True)

    def build_config(self) -> uvicorn.Config:
        return uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            ssl_certfile=self.ssl_certfile,
            ssl_keyfile=self.ssl_keyfile,
            timeout_graceful_shutdown=max(int(self.grace_period_sec), 1),
            log_level="info",
        )

    def start(self) -> None:
        scheme = "https" if self.tls else "http"
        print(f"[SHUTDOWN][listen] scheme={scheme} addr={self.host}:{self.port}", flush=True)
        self.server = self._server_factory(self.build_config())
        self.server_thread = threading.Thread(target=self.server.run, daemon=True, name="webhook-server")
        self.server_thread.start()
        self._await_startup()

    def _await_startup(self) -> None:
        # uvicorn exits its thread via sys.exit when it cannot bind.
        deadline = time.monotonic() + self.startup_timeout_sec
        while time.monotonic() < deadline:
            if getattr(self.server, "started", False) is True:
                return
            if not self.server_thread.is_alive():
                self._set_state(ShutdownState.STOPPED)
                raise RuntimeError(f"webhook server failed to start on port {self.port}")
            time.sleep(0.05)
        print(f"[SHUTDOWN][startup_slow] sec={self.startup_timeout_sec}", flush=True)

    def stop(self, message: str | None) -> None:
        self._set_state(ShutdownState.SHUTTING_DOWN)
        print(f"[SHUTDOWN][message] {message}", flush=True)
        if self.server is not None:
            self.server.should_exit = True
        if self.server_thread is not None:
            self.server_thread.join(timeout=self.grace_period_sec)
            if self.server_thread.is_alive():
                print(f"[SHUTDOWN][grace_exceeded] sec={self.grace_period_sec}", flush=True)
        self._set_state(ShutdownState.STOPPED)
        print("[SHUTDOWN][done] gracefully shutdown", flush=True)

    def run(self) -> None:
        try:
            self.start()
        except RuntimeError as exc:
            print(f"[SHUTDOWN][listen_failed] error={exc}", flush=True)
            self._exit_fn(1)
            return

        while not self.signal.is_set():
            self.signal.wait(self.watch_interval_sec)
            if not self.signal.is_set() and not self.server_thread.is_alive():
                print("[SHUTDOWN][listener_died]", flush=True)
                self._set_state(ShutdownState.STOPPED)
                self._exit_fn(1)
                return

        self.stop(self.signal.wait(0))
        self._exit_fn(0)

    def run_in_background(self) -> threading.Thread:
        worker = threading.Thread(target=self.run, daemon=True, name="shutdown-controller")
        worker.start()
        return worker
