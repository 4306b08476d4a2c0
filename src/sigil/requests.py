"""Request primitives."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any
from urllib.parse import parse_qsl

from .exceptions import HTTPError
from .http import Status

_MAX_PARAMS = 256
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Request:
    """Immutable view of an inbound request, handed to the flows explicitly."""

    __slots__ = (
        "_body",
        "_form_params",
        "_query_params",
        "_raw_query",
        "headers",
        "method",
        "path",
    )

    def __init__(
        self,
        *,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        query_string: str | None = None,
        body: bytes | None = None,
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self._raw_query = query_string or ""
        self._body = body or b""
        self._query_params: MutableMapping[str, list[str]] | None = None
        self._form_params: MutableMapping[str, list[str]] | None = None

    @staticmethod
    def _parse_pairs(raw: str) -> MutableMapping[str, list[str]]:
        parsed: MutableMapping[str, list[str]] = {}
        try:
            pairs = parse_qsl(raw, keep_blank_values=True, max_num_fields=_MAX_PARAMS)
        except ValueError as exc:
            raise HTTPError(Status.BAD_REQUEST, {"detail": "too_many_parameters"}) from exc
        for key, value in pairs:
            parsed.setdefault(key, []).append(value)
        return parsed

    @property
    def query_params(self) -> MutableMapping[str, list[str]]:
        if self._query_params is None:
            self._query_params = self._parse_pairs(self._raw_query)
        return self._query_params

    @property
    def form_params(self) -> MutableMapping[str, list[str]]:
        if self._form_params is None:
            content_type = (self.header("content-type") or "").split(";", 1)[0].strip().lower()
            if self.method == "POST" and content_type == _FORM_CONTENT_TYPE:
                try:
                    raw = self._body.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise HTTPError(Status.BAD_REQUEST, {"detail": "invalid_form_encoding"}) from exc
                self._form_params = self._parse_pairs(raw)
            else:
                self._form_params = {}
        return self._form_params

    def params(self) -> dict[str, str]:
        """Return single-valued parameters; form fields win over query fields, last value wins."""

        merged: dict[str, str] = {}
        for source in (self.query_params, self.form_params):
            for key, values in source.items():
                if values:
                    merged[key] = values[-1]
        return merged

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    def body(self) -> bytes:
        return self._body


def single_params(source: Request | Mapping[str, Any]) -> dict[str, Any]:
    """Flatten inbound parameters to one value per name, keeping the last value."""

    if isinstance(source, Request):
        return source.params()
    flattened: dict[str, Any] = {}
    for key, value in source.items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[-1]
        flattened[key] = value
    return flattened


__all__ = ["Request", "single_params"]
