"""Response handler wrapping the validator with error tracking and fallback.

Extended description:
        * handle_api_response never hands a raw value back: callers receive a
          NormalizedResponse, or the fallback record when processing faults.
        * A per-instance error counter increments on every response with
          validation issues and resets on the first clean one. Crossing
          max_errors is only logged and reported, never enforced.
        * create_safe_api_wrapper guards an upstream call (sync, async, or one
          returning an awaitable) so a raising transport yields the fallback
          record too.
"""

import functools
import inspect
import logging
import threading
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from app.core.config import get_settings
from app.compat.schemas import ErrorReport, HandlerOptions, NormalizedResponse
from app.compat.validator import ApiResponseValidator, utc_now_iso

log = logging.getLogger("compat.handler")

OptionsLike = Union[HandlerOptions, Dict[str, Any], None]


def coerce_options(options: OptionsLike = None) -> HandlerOptions:
    """Accept HandlerOptions, a plain dict (snake_case or camelCase keys) or None."""
    if options is None:
        return HandlerOptions()
    if isinstance(options, HandlerOptions):
        return options
    return HandlerOptions.model_validate(options)


def _is_async_callable(api_call: Callable) -> bool:
    return inspect.iscoroutinefunction(api_call) or inspect.iscoroutinefunction(
        getattr(api_call, "__call__", None)
    )


class ResponseHandler:
    """Stateful front door for normalizing upstream API responses.

    Key points:
        - Owns one ApiResponseValidator (shared synonym table for its calls).
        - error_count is instance state; independent consumers should own
          independent handlers.
        - Counter updates are serialized so concurrent calls stay consistent.
    """

    def __init__(self, validator: Optional[ApiResponseValidator] = None, max_errors: Optional[int] = None):
        self.settings = get_settings()
        self.validator = validator or ApiResponseValidator()
        self.max_errors = self.settings.MAX_ERRORS if max_errors is None else max_errors
        self.error_count = 0
        self._lock = threading.Lock()

    def handle_api_response(self, api_response: Any, options: OptionsLike = None) -> NormalizedResponse:
        opts = coerce_options(options)
        try:
            normalized = self.validator.validate_and_normalize(api_response, opts.required_fields)

            issues = normalized.validation.issues
            if issues:
                if opts.enable_logging:
                    log.warning("response_validation_issues issues=%s", issues)
                with self._lock:
                    self.error_count += 1
                    count = self.error_count
                if count > self.max_errors:
                    log.error(
                        "too_many_compatibility_issues error_count=%d max_errors=%d", count, self.max_errors
                    )
            else:
                with self._lock:
                    self.error_count = 0

            return normalized

        except Exception as exc:
            log.error("response_processing_failed error=%s", exc, exc_info=True)
            if opts.enable_fallback:
                return self.validator.create_fallback_response()
            raise

    def create_safe_api_wrapper(self, api_call: Callable, options: OptionsLike = None) -> Callable:
        """Wrap ``api_call`` so its result is normalized and its faults fall back.

        Coroutine functions and objects with an async ``__call__`` get an async
        wrapper. Any other callable gets a sync wrapper, which still returns an
        awaitable when the call hands back one (``lambda m: client.send(m)``).
        enable_fallback=False lets the call's exception propagate.
        """
        opts = coerce_options(options)

        def _on_failure(exc: Exception) -> NormalizedResponse:
            log.error("api_call_failed call=%s error=%s", getattr(api_call, "__name__", api_call), exc)
            if opts.enable_fallback:
                return self.validator.create_fallback_response()
            raise exc

        async def _settle(pending: Awaitable) -> NormalizedResponse:
            try:
                raw = await pending
                return self.handle_api_response(raw, opts)
            except Exception as exc:
                return _on_failure(exc)

        if _is_async_callable(api_call):
            @functools.wraps(api_call)
            async def async_wrapper(*args, **kwargs):
                try:
                    pending = api_call(*args, **kwargs)
                except Exception as exc:
                    return _on_failure(exc)
                return await _settle(pending)
            return async_wrapper

        @functools.wraps(api_call)
        def wrapper(*args, **kwargs):
            try:
                raw = api_call(*args, **kwargs)
                if inspect.isawaitable(raw):
                    return _settle(raw)
                return self.handle_api_response(raw, opts)
            except Exception as exc:
                return _on_failure(exc)
        return wrapper

    # ---- Reporting ----
    def get_recommendations(self, error_count: Optional[int] = None) -> List[str]:
        count = self.error_count if error_count is None else error_count
        recommendations: List[str] = []
        if count > 0:
            recommendations.append("Check whether the API response format has changed")
            recommendations.append("Consider updating the field mapping configuration")
        if count > self.max_errors:
            recommendations.append("Contact the API provider to confirm version compatibility")
            recommendations.append("Consider adding API version detection")
        return recommendations

    def generate_error_report(self) -> ErrorReport:
        with self._lock:
            count = self.error_count
        return ErrorReport(
            timestamp=utc_now_iso(),
            error_count=count,
            max_errors=self.max_errors,
            status="critical" if count > self.max_errors else "normal",
            recommendations=self.get_recommendations(count),
        )

    def reset(self) -> None:
        with self._lock:
            self.error_count = 0


# Process-wide instance used by the HTTP layer
response_handler = ResponseHandler()
