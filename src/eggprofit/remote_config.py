"""
Remote config client — organic install re-check and session config fetch.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from eggprofit.errors import AttributionVerificationFailed, ConfigFetchFailed, EggProfitError
from eggprofit.models.config import AttributionPayload, InstallMetadata, SessionConfigResponse
from eggprofit.transport.http import HTTP_ERROR, TRANSPORT_ERROR, HttpClient

logger = logging.getLogger(__name__)


class RemoteConfigClient:
    def __init__(
        self,
        http: HttpClient,
        config_endpoint: str,
        attribution_endpoint: str,
        dev_key: str,
        config_timeout: float = 30.0,
        attribution_timeout: float = 10.0,
    ):
        self._http = http
        self._config_endpoint = config_endpoint
        self._attribution_endpoint = attribution_endpoint
        self._dev_key = dev_key
        self._config_timeout = config_timeout
        self._attribution_timeout = attribution_timeout

    async def verify_organic_install(self, install_id: str) -> AttributionPayload:
        """Ask the attribution service for this install's conversion data."""
        try:
            body = await self._http.get(
                self._attribution_endpoint,
                params={"devkey": self._dev_key, "device_id": install_id},
                timeout=self._attribution_timeout,
            )
        except EggProfitError as e:
            raise AttributionVerificationFailed(str(e), {"cause": e.code})
        if not isinstance(body, dict):
            raise AttributionVerificationFailed("Attribution body is not a JSON object")
        return body

    async def fetch_session_config(
        self, payload: AttributionPayload, metadata: InstallMetadata,
    ) -> SessionConfigResponse:
        """POST attribution + install metadata, return the validated response."""
        body: dict[str, Any] = {**payload, **metadata.model_dump(exclude_none=True)}
        try:
            json.dumps(body)
        except (TypeError, ValueError) as e:
            raise ConfigFetchFailed(ConfigFetchFailed.TRANSPORT, f"Request body not encodable: {e}")

        try:
            data = await self._http.post(self._config_endpoint, body, timeout=self._config_timeout)
        except EggProfitError as e:
            if e.code == TRANSPORT_ERROR:
                kind = ConfigFetchFailed.TRANSPORT
            elif e.code == HTTP_ERROR:
                kind = ConfigFetchFailed.STATUS
            else:
                kind = ConfigFetchFailed.MALFORMED_BODY
            raise ConfigFetchFailed(kind, str(e), e.details)

        if not isinstance(data, dict):
            raise ConfigFetchFailed(ConfigFetchFailed.MALFORMED_BODY, "Config body is not a JSON object")
        try:
            response = SessionConfigResponse.model_validate(data)
        except ValidationError as e:
            raise ConfigFetchFailed(ConfigFetchFailed.MALFORMED_BODY, f"Invalid config body: {e}")
        logger.debug(f"Session config ok={response.ok}")
        return response
