"""Span helpers for store and service operations.

`traced` wraps a sync or async callable in a span. Arguments named in
`record` are copied onto the span whether they were passed positionally or
by keyword, so `read(path)` and `read(path=...)` trace the same way. Payload
arguments are never recorded: they may carry envelope ciphertext or
user-authored content.
"""

import inspect
from collections.abc import Callable, Iterable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Argument names that may be recorded on spans.
DEFAULT_RECORDED_ARGS = ("path", "collection", "name", "item_id", "form_id", "entry_id")

_tracer = trace.get_tracer("trackdesk")


def _recorded_args(
    signature: inspect.Signature,
    names: tuple[str, ...],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, str]:
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return {}
    return {
        f"trackdesk.{name}": str(value)
        for name, value in bound.arguments.items()
        if name in names and value is not None
    }


def _finish(span: trace.Span, error: BaseException | None) -> None:
    if error is None:
        span.set_status(Status(StatusCode.OK))
        return
    span.set_status(Status(StatusCode.ERROR, str(error)))
    span.record_exception(error)


def traced(
    span_name: str | None = None,
    *,
    record: Iterable[str] = DEFAULT_RECORDED_ARGS,
    attributes: dict[str, str | int | float | bool] | None = None,
) -> Callable:
    """Decorate a function so each call runs in its own span.

    Args:
        span_name: Span name; defaults to module.qualname.
        record: Argument names copied onto the span as trackdesk.<name>.
        attributes: Static attributes set on every span.
    """
    names = tuple(record)

    def decorator(func: Callable) -> Callable:
        name = span_name or f"{func.__module__}.{func.__qualname__}"
        signature = inspect.signature(func)

        def start(args: tuple[Any, ...], kwargs: dict[str, Any]):
            span_attrs = dict(attributes or {})
            span_attrs.update(_recorded_args(signature, names, args, kwargs))
            return _tracer.start_as_current_span(
                name, attributes=span_attrs, record_exception=False, set_status_on_exception=False
            )

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with start(args, kwargs) as span:
                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        _finish(span, e)
                        raise
                    _finish(span, None)
                    return result

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with start(args, kwargs) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _finish(span, e)
                    raise
                _finish(span, None)
                return result

        return sync_wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Set attributes on the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes({f"trackdesk.{k}": v for k, v in attributes.items()})


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Record a named event (e.g. a rejected write) on the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=attributes or {})
