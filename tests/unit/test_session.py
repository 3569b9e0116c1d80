"""Unit tests for SessionBroker and plugin argument rendering."""

import json
import logging
import threading
import time
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ReadTimeoutError
from botocore.stub import Stubber

from ssmhop.core.models import SessionHandle
from ssmhop.providers.aws.session import SessionBroker, build_plugin_arguments
from ssmhop.providers.exceptions import SessionCloseFailed, SessionOpenFailed

REGION = "eu-west-1"

START_RESPONSE = {
    "SessionId": "alice-0123456789abcdef0",
    "StreamUrl": "wss://ssmmessages.eu-west-1.amazonaws.com/v1/data-channel/x",
    "TokenValue": "token-abc",
}


@pytest.fixture
def ssm_client(aws_credentials):
    """Return a real SSM client wrapped in a Stubber."""
    client = boto3.client("ssm", region_name=REGION)
    with Stubber(client) as stubber:
        client.stubber = stubber
        yield client


@pytest.fixture
def client_factory(ssm_client):
    """Factory returning the stubbed client and recording its arguments."""
    calls = []

    def factory(service_name, **kwargs):
        calls.append((service_name, kwargs))
        return ssm_client

    factory.calls = calls
    return factory


@pytest.fixture
def trickling_endpoint() -> Generator[str, None, None]:
    """Serve an HTTP endpoint that sends its response one byte every 0.2s.

    Each read completes well within any socket timeout, so only an overall
    deadline can stop a client waiting on it.

    Yields
    ------
    str
        Endpoint URL
    """
    stop = threading.Event()

    class TricklingHandler(BaseHTTPRequestHandler):
        def do_POST(self) -> None:
            self.rfile.read(int(self.headers.get("Content-Length", 0)))
            self.send_response(200)
            self.send_header("Content-Type", "application/x-amz-json-1.1")
            self.send_header("Content-Length", "100000")
            self.end_headers()
            try:
                while not stop.is_set():
                    self.wfile.write(b" ")
                    self.wfile.flush()
                    time.sleep(0.2)
            except OSError:
                return

        def log_message(self, format: str, *args) -> None:
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), TricklingHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{server.server_address[1]}"

    stop.set()
    server.shutdown()
    server.server_close()


@pytest.fixture
def trickling_factory(aws_credentials, trickling_endpoint):
    """Client factory pointing SSM at the trickling endpoint."""

    def factory(service_name, **kwargs):
        return boto3.client(service_name, endpoint_url=trickling_endpoint, **kwargs)

    return factory


class TestOpen:
    """Tests for SessionBroker.open."""

    def test_shell_session(self, ssm_client, client_factory) -> None:
        ssm_client.stubber.add_response(
            "start_session", START_RESPONSE, expected_params={"Target": "i-0abc123"}
        )
        broker = SessionBroker(REGION, boto3_client_factory=client_factory)

        handle = broker.open("i-0abc123")

        assert handle.session_id == START_RESPONSE["SessionId"]
        assert handle.region == REGION
        assert handle.endpoint_url == "https://ssm.eu-west-1.amazonaws.com"
        assert handle.request == {"Target": "i-0abc123"}
        assert handle.closed is False
        ssm_client.stubber.assert_no_pending_responses()

    def test_document_and_parameters(self, ssm_client, client_factory) -> None:
        expected = {
            "Target": "i-0abc123",
            "DocumentName": "AWS-StartPortForwardingSession",
            "Parameters": {"portNumber": ["80"], "localPortNumber": ["8080"]},
        }
        ssm_client.stubber.add_response("start_session", START_RESPONSE, expected)
        broker = SessionBroker(REGION, boto3_client_factory=client_factory)

        handle = broker.open(
            "i-0abc123",
            document_name="AWS-StartPortForwardingSession",
            parameters={"portNumber": ["80"], "localPortNumber": ["8080"]},
        )

        assert handle.request == expected

    def test_deadline_applied_without_retries(self, ssm_client, client_factory) -> None:
        ssm_client.stubber.add_response("start_session", START_RESPONSE)
        broker = SessionBroker(REGION, boto3_client_factory=client_factory, open_timeout=7)

        broker.open("i-0abc123")

        service_name, kwargs = client_factory.calls[0]
        assert service_name == "ssm"
        assert kwargs["region_name"] == REGION
        assert kwargs["config"].connect_timeout == 7
        assert kwargs["config"].read_timeout == 7
        assert kwargs["config"].retries == {"total_max_attempts": 1}

    def test_rejected(self, ssm_client, client_factory) -> None:
        ssm_client.stubber.add_client_error(
            "start_session",
            service_error_code="TargetNotConnected",
            service_message="i-0abc123 is not connected.",
        )
        broker = SessionBroker(REGION, boto3_client_factory=client_factory)

        with pytest.raises(SessionOpenFailed) as exc_info:
            broker.open("i-0abc123")

        assert exc_info.value.error_code == "TargetNotConnected"
        assert "not connected" in str(exc_info.value)

    def test_timeout(self) -> None:
        client = MagicMock()
        client.start_session.side_effect = ReadTimeoutError(endpoint_url="https://ssm")
        broker = SessionBroker(REGION, boto3_client_factory=lambda *a, **kw: client)

        with pytest.raises(SessionOpenFailed) as exc_info:
            broker.open("i-0abc123")

        assert exc_info.value.error_code == "ReadTimeoutError"
        assert client.start_session.call_count == 1

    def test_slow_response_hits_overall_deadline(self, trickling_factory) -> None:
        broker = SessionBroker(REGION, boto3_client_factory=trickling_factory, open_timeout=1)

        started = time.monotonic()
        with pytest.raises(SessionOpenFailed) as exc_info:
            broker.open("i-0abc123")
        elapsed = time.monotonic() - started

        assert exc_info.value.error_code == "Timeout"
        assert elapsed < 3


class TestClose:
    """Tests for SessionBroker.close."""

    def make_handle(self) -> SessionHandle:
        return SessionHandle(
            session_id="sess-1", stream_url="wss://x", token_value="t", region=REGION
        )

    def test_terminates_once(self, ssm_client, client_factory, caplog) -> None:
        ssm_client.stubber.add_response(
            "terminate_session", {"SessionId": "sess-1"}, {"SessionId": "sess-1"}
        )
        broker = SessionBroker(REGION, boto3_client_factory=client_factory)
        handle = self.make_handle()

        with caplog.at_level(logging.INFO):
            assert broker.close(handle) is True

        assert handle.closed is True
        assert any("Deleting session sess-1" in r.message for r in caplog.records)

    def test_second_close_is_noop(self, ssm_client, client_factory) -> None:
        ssm_client.stubber.add_response("terminate_session", {"SessionId": "sess-1"})
        broker = SessionBroker(REGION, boto3_client_factory=client_factory)
        handle = self.make_handle()

        broker.close(handle)

        assert broker.close(handle) is False
        ssm_client.stubber.assert_no_pending_responses()

    def test_failure_marks_closed(self, ssm_client, client_factory) -> None:
        ssm_client.stubber.add_client_error(
            "terminate_session", service_error_code="InternalServerError"
        )
        broker = SessionBroker(REGION, boto3_client_factory=client_factory)
        handle = self.make_handle()

        with pytest.raises(SessionCloseFailed):
            broker.close(handle)

        assert handle.closed is True

    def test_uses_close_deadline(self, ssm_client, client_factory) -> None:
        ssm_client.stubber.add_response("terminate_session", {"SessionId": "sess-1"})
        broker = SessionBroker(
            REGION, boto3_client_factory=client_factory, close_timeout=3
        )

        broker.close(self.make_handle())

        assert client_factory.calls[0][1]["config"].read_timeout == 3

    def test_slow_terminate_hits_overall_deadline(self, trickling_factory) -> None:
        broker = SessionBroker(
            REGION, boto3_client_factory=trickling_factory, close_timeout=1
        )
        handle = self.make_handle()

        started = time.monotonic()
        with pytest.raises(SessionCloseFailed) as exc_info:
            broker.close(handle)
        elapsed = time.monotonic() - started

        assert exc_info.value.error_code == "Timeout"
        assert handle.closed is True
        assert elapsed < 3


class TestBuildPluginArguments:
    """Tests for build_plugin_arguments."""

    def test_argument_order(self) -> None:
        handle = SessionHandle(
            session_id="sess-1",
            stream_url="wss://x",
            token_value="t",
            region=REGION,
            endpoint_url="https://ssm.eu-west-1.amazonaws.com",
            request={"Target": "i-0abc123"},
        )

        args = build_plugin_arguments(handle, profile="dev")

        assert json.loads(args[0]) == {
            "SessionId": "sess-1",
            "StreamUrl": "wss://x",
            "TokenValue": "t",
        }
        assert args[1:4] == [REGION, "StartSession", "dev"]
        assert json.loads(args[4]) == {"Target": "i-0abc123"}
        assert args[5] == "https://ssm.eu-west-1.amazonaws.com"
