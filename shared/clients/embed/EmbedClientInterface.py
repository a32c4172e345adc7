from abc import abstractmethod

import httpx

from shared.clients.ClientInterface import ClientInterface, RETRYABLE_ERRORS
from shared.clients.errors import MalformedResponseError
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)

        # model and retry config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default="text-embedding-004")
        self.max_retries = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_MAX_RETRIES", default=3))

    ##########################################
    ############### CHECKER ##################
    ##########################################

    @abstractmethod
    def has_credentials(self) -> bool:
        """
        Returns True when the credentials needed for embedding requests are configured.
        """
        pass

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "embed"

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path (e.g. "/models/text-embedding-004:embedContent")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, text: str) -> dict:
        """Build the backend-specific request body for embedding a single text.

        Args:
            text (str): The literal text to embed.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the embedding vector from a raw embedding API response.

        Raises:
            MalformedResponseError: If the response does not contain a non-empty vector.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, text: str) -> list[float] | None:
        """Embed ``text``, retrying transient failures with exponential backoff.

        Never raises for backend problems: an absent result means "no semantic
        signal available" and callers fall back to keyword matching.

        Args:
            text (str): The text to embed.

        Returns:
            list[float] | None: The embedding, or None when credentials are
            missing, all attempts failed, or the response was malformed.
        """
        if not self.has_credentials():
            self.logging.warning("No API key configured for %s embeddings. Skipping embedding request.", self.get_engine_name())
            return None

        body = self.get_embed_payload(text)
        try:
            async for attempt in self._retrying(self.max_retries):
                with attempt:
                    response = await self.do_request(
                        method="POST",
                        endpoint=self.get_endpoint_embedding(),
                        json=body,
                        raise_on_error=True,
                    )
            return self.extract_embedding_from_response(response.json())
        except RETRYABLE_ERRORS as exc:
            self.logging.error(
                "Embedding request to %s failed after %d attempt(s): %s",
                self.get_engine_name(), self.max_retries + 1, exc,
            )
        except (MalformedResponseError, ValueError, httpx.HTTPError) as exc:
            self.logging.error("Embedding response from %s unusable: %s", self.get_engine_name(), exc)
        return None
