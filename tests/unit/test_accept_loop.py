"""Unit tests for the accept loop and lifecycle bookkeeping."""

import logging
import socket
import threading
from unittest.mock import MagicMock, patch

from rawhttpd.bootstrap.config import ServerConfig
from rawhttpd.lifecycle.state import ServerLifecycle
from rawhttpd.transport.accept_loop import run_server


def _config():
    return ServerConfig(
        directory="/srv/files", host="127.0.0.1", port=8080, shutdown_grace_seconds=1
    )


def test_run_server_logs_listening_and_stops(caplog):
    caplog.set_level(logging.INFO, logger="rawhttpd")
    lifecycle = ServerLifecycle()

    with patch("rawhttpd.transport.accept_loop.create_server_socket") as mock_create:
        server_sock = MagicMock()

        def accept():
            lifecycle.begin_shutdown()
            raise socket.timeout()

        server_sock.accept.side_effect = accept
        mock_create.return_value = server_sock

        run_server(_config(), lifecycle)

    events = [getattr(r, "event", None) for r in caplog.records]
    assert "server_listening" in events
    assert "server_stopped" in events
    listening = next(
        r for r in caplog.records if getattr(r, "event", None) == "server_listening"
    )
    assert listening.host == "127.0.0.1"
    assert listening.port == 8080
    server_sock.close.assert_called_once()


def test_run_server_spawns_worker_per_connection(caplog):
    caplog.set_level(logging.DEBUG, logger="rawhttpd")
    logging.getLogger("rawhttpd").setLevel(logging.DEBUG)
    lifecycle = ServerLifecycle()
    client_sock = MagicMock()
    pending = [(client_sock, ("10.0.0.1", 40000))]

    def accept():
        if pending:
            return pending.pop()
        lifecycle.begin_shutdown()
        raise socket.timeout()

    with patch(
        "rawhttpd.transport.accept_loop.create_server_socket"
    ) as mock_create, patch(
        "rawhttpd.transport.accept_loop.handle_client"
    ) as mock_handle:
        mock_create.return_value = MagicMock(accept=accept)
        run_server(_config(), lifecycle)

    mock_handle.assert_called_once()
    args = mock_handle.call_args.args
    assert args[0] is client_sock
    assert args[1] == ("10.0.0.1", 40000)
    assert args[2].config == _config()
    assert args[2].lifecycle is lifecycle
    accepted = next(
        r for r in caplog.records if getattr(r, "event", None) == "client_accepted"
    )
    assert accepted.client == "10.0.0.1:40000"


def test_accept_errors_are_logged_and_loop_continues(caplog):
    caplog.set_level(logging.ERROR, logger="rawhttpd")
    lifecycle = ServerLifecycle()
    outcomes = [OSError("accept failed")]

    def accept():
        if outcomes:
            raise outcomes.pop()
        lifecycle.begin_shutdown()
        raise socket.timeout()

    with patch("rawhttpd.transport.accept_loop.create_server_socket") as mock_create:
        mock_create.return_value = MagicMock(accept=accept)
        run_server(_config(), lifecycle)

    assert any(getattr(r, "event", None) == "accept_error" for r in caplog.records)


def test_wait_for_workers_returns_when_threads_finish():
    lifecycle = ServerLifecycle()
    release = threading.Event()
    worker = threading.Thread(target=release.wait)
    lifecycle.register_worker(worker)
    worker.start()

    assert lifecycle.active_worker_count() == 1
    assert lifecycle.wait_for_workers(0.05) is False
    release.set()
    assert lifecycle.wait_for_workers(2) is True
    assert lifecycle.active_worker_count() == 0


def test_begin_shutdown_sets_stop_flag():
    lifecycle = ServerLifecycle()

    assert not lifecycle.should_stop()
    lifecycle.begin_shutdown()
    assert lifecycle.should_stop()
