"""Tests del espejo de logs hacia el bus.

Cubre:
1. Formato de mensajes con valores extra
2. Reenvío al sink local siempre
3. Publicación de ServiceLogEntry
4. Fallos del bus invisibles para quien loguea
5. Umbral global de nivel
6. Activación que devuelve un registro nuevo

Ejecutar:
    pytest tests/test_log_mirror.py -v
"""

import logging
from unittest.mock import MagicMock

import orjson
import pytest

from nat_telemetry.core.domain.bus_interface import InMemoryBus
from nat_telemetry.core.domain.errors import EncodingError, TransportError
from nat_telemetry.logs import (
    BusLogMirror,
    ServiceLogger,
    create_loggers,
    enable_bus_logging,
    format_message,
    get_log_level,
    log_subject,
    set_log_level,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def debug_threshold():
    """Umbral en debug durante el test; restaura el anterior."""
    root = logging.getLogger("nftables")
    previous = root.level
    set_log_level("debug")
    yield
    root.setLevel(previous)


@pytest.fixture
def inner() -> MagicMock:
    """Sink base simulado."""
    sink = MagicMock(spec=ServiceLogger)
    sink.is_enabled_for.return_value = True
    return sink


@pytest.fixture
def failing_bus() -> MagicMock:
    bus = MagicMock()
    bus.publish.side_effect = TransportError("disconnected")
    return bus


def _mirror(inner, bus) -> BusLogMirror:
    return BusLogMirror(
        inner,
        bus,
        service_type="nftables",
        module_id="fw-01",
        logger_name="nftables:service",
    )


class Unprintable:
    def __str__(self):
        raise RuntimeError("boom")


# =============================================================================
# TEST 1: FORMATO
# =============================================================================

class TestFormatMessage:
    """Valores extra inline en el mensaje."""

    def test_no_values(self):
        assert format_message("hello", ()) == "hello"

    def test_mixed_values(self):
        text = format_message("Applied", ("rules", {"b": 2, "a": 1}, [1, 2], True, 3))
        assert text == 'Applied rules {"a":1,"b":2} [1,2] true 3'

    def test_unserializable_value_raises(self):
        with pytest.raises(EncodingError):
            format_message("x", (Unprintable(),))


# =============================================================================
# TEST 2-3: REENVÍO Y PUBLICACIÓN
# =============================================================================

class TestMirrorForwarding:
    """El sink local recibe la llamada sin cambios y el bus un ServiceLogEntry."""

    @pytest.mark.parametrize("method", ["info", "warn", "error", "debug"])
    def test_forwards_unchanged(self, inner, method):
        mirror = _mirror(inner, InMemoryBus())
        getattr(mirror, method)("hello", 1, "two")
        inner.log.assert_called_once_with(method, "hello", 1, "two")

    def test_publishes_log_entry(self, inner):
        bus = InMemoryBus()
        mirror = _mirror(inner, bus)

        mirror.warn("Rule applied", {"id": "r1"})

        subject, payload = bus.messages[0]
        assert subject == "service.logs.nftables.fw-01"
        entry = orjson.loads(payload)
        assert entry["level"] == "warn"
        assert entry["message"] == 'Rule applied {"id":"r1"}'
        assert entry["serviceType"] == "nftables"
        assert entry["moduleId"] == "fw-01"
        assert entry["logger"] == "nftables:service"
        assert isinstance(entry["timestamp"], int)

    def test_warning_alias(self, inner):
        bus = InMemoryBus()
        _mirror(inner, bus).warning("x")
        assert orjson.loads(bus.messages[0][1])["level"] == "warn"

    def test_subject(self):
        assert log_subject("nftables", "nftables") == "service.logs.nftables.nftables"


# =============================================================================
# TEST 4: FALLOS DEL BUS
# =============================================================================

class TestMirrorNonInterference:
    """Con el bus fallando, todo sigue igual para quien loguea."""

    def test_failing_bus_is_invisible(self, inner, failing_bus):
        mirror = _mirror(inner, failing_bus)

        for method in ("info", "warn", "error", "debug"):
            getattr(mirror, method)("message", 42)

        assert inner.log.call_count == 4
        assert failing_bus.publish.call_count == 4
        assert mirror.stats.failed == 4
        assert "TransportError" in mirror.stats.last_error

    def test_unexpected_bus_exception_absorbed(self, inner):
        bus = MagicMock()
        bus.publish.side_effect = RuntimeError("socket closed")
        _mirror(inner, bus).error("boom")
        inner.log.assert_called_once_with("error", "boom")

    def test_encoding_failure_absorbed(self, inner):
        bus = MagicMock()
        mirror = _mirror(inner, bus)

        mirror.info("value", Unprintable())

        inner.log.assert_called_once()
        bus.publish.assert_not_called()
        assert mirror.stats.failed == 1

    def test_real_sink_still_writes_when_bus_fails(self, failing_bus, caplog):
        caplog.set_level(logging.DEBUG)
        mirror = _mirror(ServiceLogger("nftables:service"), failing_bus)

        mirror.info("still logged", {"a": 1})

        assert 'still logged {"a":1}' in caplog.messages

    def test_send_result_preserves_failure(self, inner, failing_bus):
        result = _mirror(inner, failing_bus)._send("info", "x", ())
        assert result.ok is False
        assert isinstance(result.error, TransportError)


# =============================================================================
# TEST 5: UMBRAL DE NIVEL
# =============================================================================

class TestLevelThreshold:
    """El umbral global aplica al sink local y al bus sin reinstalar."""

    def test_threshold_applies_to_bus(self):
        bus = InMemoryBus()
        mirror = _mirror(ServiceLogger("nftables:service"), bus)

        set_log_level("error")
        mirror.info("dropped")
        assert bus.messages == []

        set_log_level("debug")
        mirror.info("sent")
        assert len(bus.messages) == 1

    def test_threshold_applies_locally(self, caplog):
        caplog.set_level(logging.DEBUG)
        log = ServiceLogger("nftables:cmd")

        set_log_level("warn")
        log.info("hidden")
        log.error("shown")

        assert "hidden" not in caplog.messages
        assert "shown" in caplog.messages

    def test_threshold_applies_to_custom_prefix(self, caplog):
        caplog.set_level(logging.DEBUG)
        registry = create_loggers(prefix="edge")

        set_log_level("error")
        registry.service.info("hidden")
        registry.cmd.error("shown")

        assert "hidden" not in caplog.messages
        assert "shown" in caplog.messages

    def test_get_log_level(self):
        set_log_level("WARNING")
        assert get_log_level() == "WARNING"

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            set_log_level("verbose")


# =============================================================================
# TEST 6: ACTIVACIÓN
# =============================================================================

class TestEnableBusLogging:
    """La activación devuelve un registro nuevo; el anterior queda intacto."""

    def test_returns_new_registry(self):
        registry = create_loggers()
        bus = InMemoryBus()

        mirrored = enable_bus_logging(registry, bus, "nftables", "nftables")

        assert mirrored is not registry
        assert isinstance(mirrored.service, BusLogMirror)
        assert isinstance(mirrored.cmd, BusLogMirror)
        assert not isinstance(registry.service, BusLogMirror)
        assert mirrored.service.name == "nftables:service"
        assert mirrored.cmd.name == "nftables:cmd"

    def test_old_registry_does_not_publish(self):
        registry = create_loggers()
        bus = InMemoryBus()
        enable_bus_logging(registry, bus, "nftables", "nftables")

        registry.service.info("local only")
        assert bus.messages == []

    def test_re_enable_wraps_base_sink(self):
        registry = create_loggers()
        first = enable_bus_logging(registry, InMemoryBus(), "nftables", "nftables")
        second_bus = InMemoryBus()
        second = enable_bus_logging(first, second_bus, "nftables", "nftables")

        assert second.service.inner is registry.service
        second.service.info("once")
        assert len(second_bus.messages) == 1

    def test_shared_stats(self):
        registry = create_loggers()
        mirrored = enable_bus_logging(registry, InMemoryBus(), "nftables", "nftables")
        mirrored.service.info("a")
        mirrored.cmd.info("b")
        assert mirrored.service.stats.sent == 2
