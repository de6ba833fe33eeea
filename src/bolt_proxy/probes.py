"""
Diagnostic probes against the configured Bolt endpoint.

Three independent checks, each at a different layer:
- ``probe_tcp``: bare TCP connect to host:port.
- ``probe_tls``: full TLS handshake with hostname verification.
- ``probe_driver``: the driver's own ``verify_connectivity()``.

Each probe reports exactly one outcome. Connect, error and timeout race for a
one-shot future; the first to settle it wins and later events are dropped.
"""
import asyncio
import ssl
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from pydantic import BaseModel

from bolt_proxy.common.errors import ErrorCode, FailureKind, classify_failure
from bolt_proxy.common.logger import get_logger
from bolt_proxy.common.metrics import record_probe

logger = get_logger("probes")

T = TypeVar("T")


class ProbeTimeout(TimeoutError):
    """Raised into the outcome future when a probe's deadline fires first."""


class ProbeResult(BaseModel):
    """Outcome of a single probe invocation."""
    probe: str
    ok: bool
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    info: Optional[Dict[str, Any]] = None
    duration_s: float = 0.0

    @property
    def timed_out(self) -> bool:
        return self.failure == FailureKind.TIMEOUT


def _settle(outcome: asyncio.Future, result: Any = None, exc: Optional[BaseException] = None) -> bool:
    """Resolves ``outcome`` unless already resolved. Returns True if this call won."""
    if outcome.done():
        return False
    if exc is not None:
        outcome.set_exception(exc)
    else:
        outcome.set_result(result)
    return True


async def first_outcome(
    attempt: Awaitable[T],
    timeout: float,
    discard: Optional[Callable[[T], None]] = None,
) -> T:
    """Races ``attempt`` against a deadline; whichever settles first wins.

    A success arriving after the deadline is handed to ``discard`` so its
    resources are released rather than leaked.

    Raises:
        ProbeTimeout: The deadline fired first.
        Exception: Whatever ``attempt`` raised, if it failed first.
    """
    loop = asyncio.get_running_loop()
    outcome: asyncio.Future = loop.create_future()

    async def _run():
        try:
            result = await attempt
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            _settle(outcome, exc=exc)
        else:
            if not _settle(outcome, result=result) and discard is not None:
                discard(result)

    task = asyncio.ensure_future(_run())
    timer = loop.call_later(timeout, _settle, outcome, None, ProbeTimeout(ErrorCode.PROBE_TIMEOUT.value))
    try:
        return await outcome
    finally:
        timer.cancel()
        task.cancel()


def _close_stream(streams: Tuple[asyncio.StreamReader, asyncio.StreamWriter]) -> None:
    _, writer = streams
    writer.close()


async def _teardown(writer: asyncio.StreamWriter, timeout: float) -> None:
    """Closes a probe connection and waits, bounded, for the transport to finish."""
    writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), timeout)
    except (OSError, asyncio.TimeoutError) as exc:
        # Outcome is already decided; close errors do not change it.
        logger.debug(f"Probe connection teardown incomplete: {exc!r}")


def _failure(probe: str, exc: BaseException, started: float) -> ProbeResult:
    kind = classify_failure(exc)
    message = ErrorCode.PROBE_TIMEOUT.value if kind == FailureKind.TIMEOUT else (str(exc) or type(exc).__name__)
    duration = time.perf_counter() - started
    logger.warning(f"Probe '{probe}' failed ({kind.value}): {message}", extra={"probe": probe, "failure": kind.value})
    record_probe(probe, duration, kind.value)
    return ProbeResult(probe=probe, ok=False, failure=kind, error=message, duration_s=duration)


def _success(probe: str, started: float, info: Optional[Dict[str, Any]] = None) -> ProbeResult:
    duration = time.perf_counter() - started
    record_probe(probe, duration, "ok")
    return ProbeResult(probe=probe, ok=True, info=info, duration_s=duration)


async def probe_tcp(host: str, port: int, timeout: float = 4.0) -> ProbeResult:
    """Opens and immediately closes a plain TCP connection."""
    started = time.perf_counter()
    try:
        _, writer = await first_outcome(
            asyncio.open_connection(host, port), timeout, discard=_close_stream
        )
    except Exception as exc:
        return _failure("bolt", exc, started)
    await _teardown(writer, timeout)
    return _success("bolt", started)


def tls_info(ssl_object: Any, context: ssl.SSLContext) -> Dict[str, Any]:
    """Extracts handshake details from a connected SSL object."""
    cipher = ssl_object.cipher()
    cipher_info = None
    if cipher:
        name, version, bits = cipher
        cipher_info = {"name": name, "version": version, "bits": bits}
    return {
        "authorized": context.verify_mode == ssl.CERT_REQUIRED and bool(ssl_object.getpeercert()),
        "alpnProtocol": ssl_object.selected_alpn_protocol() or None,
        "cipher": cipher_info,
    }


async def probe_tls(
    host: str,
    port: int,
    timeout: float = 6.0,
    context: Optional[ssl.SSLContext] = None,
) -> ProbeResult:
    """Performs a TLS handshake validating the server certificate against ``host``."""
    context = context or ssl.create_default_context()
    started = time.perf_counter()
    try:
        _, writer = await first_outcome(
            asyncio.open_connection(host, port, ssl=context, server_hostname=host),
            timeout,
            discard=_close_stream,
        )
    except Exception as exc:
        return _failure("tls", exc, started)
    try:
        info = tls_info(writer.get_extra_info("ssl_object"), context)
    finally:
        await _teardown(writer, timeout)
    return _success("tls", started, info)


async def probe_driver(driver: Any, timeout: float = 10.0) -> ProbeResult:
    """Runs the driver's connectivity check (auth, routing and encryption included)."""
    started = time.perf_counter()
    try:
        await first_outcome(driver.verify_connectivity(), timeout)
    except Exception as exc:
        return _failure("driver", exc, started)
    return _success("driver", started)
