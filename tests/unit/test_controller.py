"""
Unit tests for the capture controller.
"""

import importlib
import json
from unittest.mock import Mock, patch

import pytest

from errplay.capture import controller as controller_module
from errplay.capture.controller import (
    CaptureController,
    ControllerState,
    Options,
    validate_options,
)
from errplay.capture.hooks import ErrorEvent
from errplay.capture.queue import QUEUE_KEY, DurableQueue
from errplay.errors import ConfigurationError

from ..conftest import FakeHost, RecordingTransport


@pytest.fixture
def controller(dev_config, fake_host):
    return CaptureController(cfg=dev_config, host=fake_host)


def stored_payloads(store):
    raw = store.get_item(QUEUE_KEY)
    return json.loads(raw) if raw else []


class TestOptionValidation:
    """Misconfiguration fails synchronously in every environment."""

    @pytest.mark.parametrize("options", [None, "endpoint", 42, [("endpoint", "/x")]])
    def test_options_must_be_a_mapping(self, options):
        with pytest.raises(ConfigurationError):
            validate_options(options)

    @pytest.mark.parametrize("options", [{}, {"endpoint": 123}, {"endpoint": ""}, {"endpoint": None}])
    def test_endpoint_must_be_a_string(self, options):
        with pytest.raises(ConfigurationError):
            validate_options(options)

    def test_valid_mapping(self):
        opts = validate_options({"endpoint": "/x"})

        assert opts.endpoint == "/x"
        assert opts.store is None

    def test_options_instance(self):
        opts = Options(endpoint="/x")

        assert validate_options(opts) is opts

    def test_invalid_options_raise_outside_development(self, prod_config):
        controller = CaptureController(cfg=prod_config, host=FakeHost(supported=False))

        with pytest.raises(ConfigurationError):
            controller.initialize({"endpoint": 123})

    def test_configuration_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_options({})

    @pytest.mark.parametrize("endpoint", ["http://[::1", "http://localhost:notaport/x"])
    def test_unparseable_endpoint(self, endpoint):
        with pytest.raises(ConfigurationError, match="invalid endpoint"):
            validate_options({"endpoint": endpoint}, base_url="http://localhost:7532")

    def test_unparseable_endpoint_raises_outside_development(self, prod_config, fake_host):
        controller = CaptureController(cfg=prod_config, host=fake_host)

        with pytest.raises(ConfigurationError):
            controller.initialize({"endpoint": "http://[::1"})

        assert fake_host.install_count == 0

    def test_absolute_endpoint_accepted(self):
        assert validate_options({"endpoint": "http://127.0.0.1:9000/__dev__/errors"}).endpoint == "http://127.0.0.1:9000/__dev__/errors"


class TestInitializationGuards:
    """Unsupported, production, and repeated calls are no-ops."""

    def test_production_does_nothing(self, prod_config, fake_host):
        store = Mock()
        transport = Mock()
        controller = CaptureController(cfg=prod_config, host=fake_host)

        result = controller.initialize({"endpoint": "/x", "store": store, "transport": transport})

        assert result is False
        assert controller.state is ControllerState.UNINITIALIZED
        assert fake_host.install_count == 0
        assert store.mock_calls == []
        assert transport.mock_calls == []

    def test_unsupported_host_does_nothing(self, dev_config):
        host = FakeHost(supported=False)
        store = Mock()
        controller = CaptureController(cfg=dev_config, host=host)

        assert controller.initialize({"endpoint": "/x", "store": store}) is False
        assert host.install_count == 0
        assert store.mock_calls == []
        assert controller.initialized is False

    def test_production_does_not_touch_storage(self, prod_config, fake_host):
        controller = CaptureController(cfg=prod_config, host=fake_host)

        with patch("errplay.capture.controller.create_session_store") as mock_factory:
            controller.initialize({"endpoint": "/x"})

        mock_factory.assert_not_called()
        assert not prod_config.session_dir.exists()

    def test_second_call_attaches_nothing(self, controller, fake_host, file_store, transport):
        assert controller.initialize({"endpoint": "/x", "store": file_store, "transport": transport}) is True
        assert controller.initialize({"endpoint": "/x", "store": file_store, "transport": transport}) is False

        assert fake_host.install_count == 1
        assert controller.state is ControllerState.ACTIVE

    def test_default_transport_targets_collector(self, controller, file_store):
        controller.initialize({"endpoint": "/__dev__/errors", "store": file_store})

        assert controller.transport.url == "http://localhost:7532/__dev__/errors"

    def test_default_store_uses_session_directory(self, controller, dev_config):
        controller.initialize({"endpoint": "/x", "transport": RecordingTransport()})

        assert controller.queue.store.session_dir == dev_config.session_path()


class TestStartupFlush:
    """Payloads left by a previous process are sent on initialization."""

    def test_prior_session_payloads_are_sent_in_order(self, controller, file_store, transport):
        previous = [
            {"type": "error", "message": "first", "timestamp": 1},
            {"type": "consoleError", "args": ["second"], "timestamp": 2},
        ]
        queue = DurableQueue(file_store)
        for payload in previous:
            queue.enqueue(payload)

        controller.initialize({"endpoint": "/x", "store": file_store, "transport": transport})

        assert transport.sent == previous
        assert file_store.get_item(QUEUE_KEY) is None

    def test_flush_happens_before_registration(self, controller, fake_host, file_store):
        order = []

        class OrderedTransport:
            def send(self, payload):
                order.append(("send", fake_host.install_count))

        DurableQueue(file_store).enqueue({"type": "error", "timestamp": 1})

        controller.initialize({"endpoint": "/x", "store": file_store, "transport": OrderedTransport()})

        assert order == [("send", 0)]
        assert fake_host.install_count == 1


class TestCapturePoints:
    """Each captured event is enqueued, then sent, as one payload."""

    @pytest.fixture
    def active(self, controller, file_store, transport):
        controller.initialize({"endpoint": "/x", "store": file_store, "transport": transport})
        return controller

    def test_uncaught_exception_scenario(self, active, fake_host, file_store, transport):
        with patch("errplay.capture.controller.now_ms", return_value=1700000000000):
            fake_host.on_error(ErrorEvent(message="boom", filename="app.js", lineno=10, colno=3))

        expected = {
            "type": "error",
            "message": "boom",
            "filename": "app.js",
            "lineno": 10,
            "colno": 3,
            "timestamp": 1700000000000,
        }
        assert stored_payloads(file_store) == [expected]
        assert transport.sent == [expected]

    def test_uncaught_exception_includes_stack(self, active, fake_host, transport):
        try:
            raise RuntimeError("kaput")
        except RuntimeError as e:
            fake_host.on_error(ErrorEvent.from_exception(e))

        payload = transport.sent[0]
        assert payload["message"] == "kaput"
        assert "RuntimeError: kaput" in payload["stack"]

    def test_unhandled_rejection_with_exception(self, active, fake_host, transport):
        try:
            raise ConnectionError("socket closed")
        except ConnectionError as e:
            fake_host.on_rejection(e)

        payload = transport.sent[0]
        assert payload["type"] == "unhandledRejection"
        assert payload["message"] == "socket closed"
        assert "ConnectionError" in payload["stack"]
        assert "filename" not in payload

    def test_unhandled_rejection_with_plain_reason(self, active, fake_host, transport):
        fake_host.on_rejection("Task was destroyed but it is pending!")

        payload = transport.sent[0]
        assert payload["message"] == "Task was destroyed but it is pending!"
        assert "stack" not in payload

    def test_logged_error_serializes_args(self, active, fake_host, file_store, transport):
        cyclic = {"id": 1}
        cyclic["self"] = cyclic

        fake_host.on_log(["failed %s", cyclic, ValueError("bad")])

        payload = transport.sent[0]
        assert payload["type"] == "consoleError"
        assert "message" not in payload
        assert payload["args"] == [
            "failed %s",
            {"id": 1, "self": "[Circular]"},
            {"kind": "Error", "name": "ValueError", "message": "bad", "stack": None},
        ]
        assert stored_payloads(file_store) == [payload]

    def test_enqueue_happens_before_send(self, dev_config, fake_host):
        calls = []
        store = Mock()
        store.get_item.return_value = None
        store.set_item.side_effect = lambda key, value: calls.append(("enqueue", value))
        controller = CaptureController(cfg=dev_config, host=fake_host)
        controller.initialize({"endpoint": "/x", "store": store, "transport": RecordingTransport(calls)})

        fake_host.on_error(ErrorEvent(message="boom"))

        assert [name for name, _ in calls] == ["enqueue", "send"]

    def test_every_event_produces_one_payload(self, active, fake_host, transport):
        for _ in range(3):
            fake_host.on_error(ErrorEvent(message="same"))

        assert len(transport.sent) == 3

    def test_payloads_persist_in_firing_order(self, active, fake_host, file_store):
        fake_host.on_error(ErrorEvent(message="one"))
        fake_host.on_rejection("two")
        fake_host.on_log(["three"])

        assert [p["type"] for p in stored_payloads(file_store)] == ["error", "unhandledRejection", "consoleError"]

    def test_failures_never_escape(self, dev_config, fake_host, file_store):
        transport = Mock()
        transport.send.side_effect = RuntimeError("network gone")
        controller = CaptureController(cfg=dev_config, host=fake_host)
        controller.initialize({"endpoint": "/x", "store": file_store, "transport": transport})

        fake_host.on_error(ErrorEvent(message="boom"))
        fake_host.on_rejection("nope")
        fake_host.on_log(["x"])

        assert len(stored_payloads(file_store)) == 3


class TestDefaultController:
    """The process-wide controller behind errplay.initialize()."""

    def test_initialize_delegates_to_default_controller(self, monkeypatch, dev_config, fake_host, file_store, transport):
        monkeypatch.setattr(controller_module, "_default_controller", CaptureController(cfg=dev_config, host=fake_host))

        assert controller_module.initialize({"endpoint": "/x", "store": file_store, "transport": transport}) is True
        assert controller_module.initialize({"endpoint": "/x", "store": file_store, "transport": transport}) is False
        assert fake_host.install_count == 1

    def test_guard_survives_module_reload(self, monkeypatch, dev_config, fake_host):
        existing = CaptureController(cfg=dev_config, host=fake_host)
        existing.initialized = True
        monkeypatch.setattr(controller_module, "_default_controller", existing)
        snapshot = dict(controller_module.__dict__)

        try:
            reloaded = importlib.reload(controller_module)

            assert reloaded.get_controller() is existing
            assert reloaded.initialize({"endpoint": "/x"}) is False
            assert fake_host.install_count == 0
        finally:
            # Put back the original class objects other tests imported.
            controller_module.__dict__.update(snapshot)
