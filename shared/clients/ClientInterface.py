import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

import httpx
from httpx._types import QueryParamTypes, RequestContent, RequestData
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from shared.clients.errors import ClientRequestError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

SleepFunc = Callable[[float], Awaitable[None]]

# failures worth another attempt: transport problems and non-2xx answers
RETRYABLE_ERRORS = (httpx.TransportError, ClientRequestError)


class ClientInterface(ABC):
    def __init__(self, helper_config: HelperConfig, sleep: SleepFunc | None = None):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        # delay function used between retries, replaced in tests
        self._sleep: SleepFunc = sleep or asyncio.sleep

        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Validates that all required configuration values for the client are set and valid.

        Raises:
            ValueError: If any required configuration value is missing or invalid.
        """
        for config in self._get_required_config():
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def has_credentials(self) -> bool:
        """
        Returns True when the client can authenticate against its backend. Clients
        whose credentials are optional keep the default.
        """
        return True

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the type of the client in lowercase. E.g. "embed"
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        pass

    def get_engine_name(self) -> str:
        """
        Returns the name of the engine used by the client in lowercase. E.g. "gemini"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns all configuration keys the client reads.

        Returns:
            list[EnvConfig]: One entry per key, relative to the client namespace.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The full configuration key name for the client. E.g. "EMBED_GEMINI_API_KEY"
        """
        key_prefix = f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}"
        return f"{key_prefix}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read the client-scoped setting ``<TYPE>_<ENGINE>_<raw_key>``.

        Raises:
            ValueError: If the setting is missing without default, cannot be
                parsed, or ``val_type`` is not one of string, number, bool, list.
        """
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in readers:
            raise ValueError(f"Unsupported config value type '{val_type}' for {self.get_client_type().upper()} client setting '{raw_key}'.")
        return readers[val_type](self._get_config_key_name(raw_key), default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the authentication header for the backend, or an empty dict.
        """
        pass

    def _get_auth_params(self) -> dict:
        """
        Returns query parameters carrying credentials (e.g. Google's ``key=``).
        Empty unless the backend authenticates through the URL.
        """
        return {}

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the base URL of the backend (e.g. "https://example.com/api").
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns the endpoint path for healthcheck requests (e.g. "/healthz").
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> bool:
        """Check if the backend is reachable by sending a test request.

        Returns:
            bool: True on a 2xx answer. Failures are logged, never raised.
        """
        try:
            response = await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck())
        except httpx.TransportError as e:
            self.logging.warning("%s %s is unreachable: %s", self.get_client_type().upper(), self.get_engine_name(), e)
            return False
        if not response.is_success:
            self.logging.warning(
                "%s %s healthcheck answered with status %d.",
                self.get_client_type().upper(), self.get_engine_name(), response.status_code,
            )
            return False
        self.logging.info("%s %s is reachable.", self.get_client_type().upper(), self.get_engine_name())
        return True

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self) -> None:
        """Initialise the HTTP client and any other resources needed for making requests."""
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def close(self) -> None:
        """Close the HTTP client and any other resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        content: RequestContent | None = None,
        data: RequestData | None = None,
        json: dict | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
        url: str | None = None,
    ) -> httpx.Response:
        """Send an HTTP request to the backend.

        Args:
            method: HTTP method (GET, POST, PATCH, …).
            content: Raw bytes / stream body.
            data: Form-encoded body.
            json: JSON-serialisable body (sets Content-Type automatically).
            params: URL query parameters, merged after the auth params.
            endpoint: Path appended to the base URL (leading slash optional).
            additional_headers: Extra headers that override the defaults.
            raise_on_error: Raise ClientRequestError on a non-2xx status.
            url: Absolute URL used instead of base URL + endpoint.

        Returns:
            The raw httpx.Response.

        Raises:
            RuntimeError: If boot() has not been called.
            ClientRequestError: On a non-2xx status when raise_on_error is set.
            httpx.TransportError: If the backend cannot be reached.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        endpoint = "/" + endpoint.strip().lstrip("/") if endpoint.strip() else ""

        headers: dict = {}
        headers.update(self._get_auth_header())
        if additional_headers:
            headers.update(additional_headers)

        query: list[tuple[str, Any]] = list(self._get_auth_params().items())
        if isinstance(params, dict):
            query.extend(params.items())
        elif params:
            query.extend(params)

        kwargs: dict = {
            "url": url or f"{self._get_base_url().rstrip('/')}{endpoint}",
            "headers": headers,
            "timeout": self.timeout,
            "params": query or None,
        }

        # add exactly one body argument
        if content is not None:
            kwargs["content"] = content
        elif data is not None:
            kwargs["data"] = data
        elif json is not None:
            kwargs["json"] = json

        response = await self._client.request(method, **kwargs)

        if raise_on_error and not response.is_success:
            self.logging.error(
                "%s request to %s %s failed with status %d: %s",
                method,
                self.get_engine_name(),
                endpoint or kwargs["url"],
                response.status_code,
                response.text[:200],
            )
            raise ClientRequestError(url=str(response.request.url), status_code=response.status_code, body=response.text)

        return response

    def _retrying(self, max_retries: int) -> AsyncRetrying:
        """Build a bounded retry loop: one attempt plus ``max_retries`` retries.

        The delay before retry k (0-indexed) is 2**k seconds, waited through
        the injected sleep function.
        """
        return AsyncRetrying(
            stop=stop_after_attempt(int(max_retries) + 1),
            wait=wait_exponential(multiplier=1, exp_base=2, min=0, max=60),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state) -> None:
        self.logging.warning(
            "%s %s request failed (attempt %d): %s. Retrying in %.0fs...",
            self.get_client_type().upper(),
            self.get_engine_name(),
            retry_state.attempt_number,
            retry_state.outcome.exception() if retry_state.outcome else "unknown error",
            retry_state.next_action.sleep if retry_state.next_action else 0,
        )
