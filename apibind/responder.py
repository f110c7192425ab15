from logging import Logger
from typing import Any

from msgspec import EncodeError

from apibind.config import BinderConfig
from apibind.context import Context
from apibind.errors import UnserializableResponseError
from apibind.log import log_internal_error
from apibind.problems import (
    INTERNAL_ERROR_MESSAGE,
    INTERNAL_ERROR_STATUS,
    ErrorBody,
    classify,
)
from apibind.utils.json import encode_json
from apibind.vendors import Request, Response

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
EMPTY_JSON = b"{}\n"


class Responder:
    """
    Encode success values and errors into json responses.

    Every body is a json document followed by a newline,
    errors are always `{"error": <message>}`.
    """

    def __init__(self, config: BinderConfig, logger: Logger):
        self._config = config
        self._logger = logger
        self._pretty_agents = tuple(config.pretty_user_agents)

    def is_pretty(self, req: Request) -> bool:
        if self._config.is_dev:
            return True
        if not self._pretty_agents:
            return False
        return req.headers.get("user-agent", "").startswith(self._pretty_agents)

    def send_empty(self) -> Response:
        return Response(EMPTY_JSON, status_code=200, media_type=JSON_CONTENT_TYPE)

    def send_json(
        self,
        req: Request,
        status: int,
        content: Any,
        ctx: Context | None = None,
        *,
        pretty: bool | None = None,
    ) -> Response:
        if pretty is None:
            pretty = self.is_pretty(req)
        try:
            body = encode_json(content, pretty=pretty)
        except (TypeError, EncodeError) as exc:
            err = UnserializableResponseError(content)
            err.__cause__ = exc
            log_internal_error(self._logger, err, req, ctx)
            status = INTERNAL_ERROR_STATUS
            body = encode_json(ErrorBody(error=INTERNAL_ERROR_MESSAGE), pretty=pretty)
        return Response(body, status_code=status, media_type=JSON_CONTENT_TYPE)

    def send_error(
        self, req: Request, exc: BaseException, ctx: Context | None = None
    ) -> Response:
        problem = classify(exc)
        if problem.internal:
            log_internal_error(self._logger, exc, req, ctx)
        return self.send_json(req, problem.status, problem.body(), ctx)
