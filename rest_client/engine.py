"""
Request execution engine context.

An ``Engine`` owns everything that lives longer than a single request: the
settings provider, the HTTP client, the lifecycle store and the responses
kept for export. The FastAPI app builds one at startup and routes reach it
through the ``get_engine`` dependency, so tests can run isolated engines.
"""

import logging
from pathlib import Path

import httpx
from fastapi import Request

from .config import SettingsProvider
from .schemas.http import HttpRequest, HttpResponse
from .services.cookies import COOKIE_FILE_PATH
from .services.http_client import HttpClient
from .services.request_store import RequestStore
from .services.response_export import RESPONSE_SAVE_FOLDER


logger = logging.getLogger(__name__)

# Number of responses kept in memory for export
RESPONSES_MAX_COUNT = 50


class Engine:
    """
    Long-lived state shared by all requests of one service instance.

    Args:
        settings_provider: Source of the current settings
        cookie_file: File backing the persistent cookie jar
        response_folder: Folder saved responses are written to
        transport: Optional httpx transport used for every request
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        cookie_file: Path = COOKIE_FILE_PATH,
        response_folder: Path = RESPONSE_SAVE_FOLDER,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self.settings_provider = settings_provider
        self.client = HttpClient(settings_provider, cookie_file=cookie_file, transport=transport)
        self.store = RequestStore()
        self.response_folder = response_folder
        self._responses: dict[str, HttpResponse] = {}

    @classmethod
    def from_environment(cls) -> "Engine":
        return cls(SettingsProvider.from_environment())

    def get_response(self, request_id: str) -> HttpResponse | None:
        return self._responses.get(request_id)

    def _keep_response(self, request_id: str, response: HttpResponse) -> None:
        self._responses[request_id] = response
        while len(self._responses) > RESPONSES_MAX_COUNT:
            del self._responses[next(iter(self._responses))]

    async def execute(
        self,
        request_id: str,
        request: HttpRequest,
        source_file: Path | None = None,
        warnings: list[str] | None = None
    ) -> HttpResponse | None:
        """
        Send a tracked request.

        The request becomes the current one. Once the exchange finishes it is
        marked completed; if it was cancelled in the meantime the response is
        discarded and None is returned.

        Raises:
            RestClientError: If the request body or transport fails. Any
                exception marks the request as failed before it propagates
        """
        self.store.register(request_id, request)
        try:
            response = await self.client.send(request, source_file=source_file, warnings=warnings)
        except Exception:
            self.store.fail(request_id)
            raise
        finally:
            self.store.complete(request_id)

        if self.store.is_cancelled(request_id):
            logger.info("Discarding response of cancelled request %s", request_id)
            return None

        self._keep_response(request_id, response)
        return response


def get_engine(request: Request) -> Engine:
    """Dependency function for FastAPI returning the app's engine."""
    return request.app.state.engine
