from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import Message


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default="gemini-2.5-flash-preview-09-2025")
        self.max_retries = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_MAX_RETRIES", default=5))

    ##########################################
    ############### CHECKER ##################
    ##########################################

    @abstractmethod
    def has_credentials(self) -> bool:
        """Returns True when the credentials needed for generation requests are configured."""
        pass

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        """Returns the endpoint path for generation requests (e.g. "/models/<model>:generateContent")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_chat_payload(self, system_prompt: str, messages: list[Message]) -> dict:
        """Build the backend-specific request body for a generation request.

        Args:
            system_prompt (str): Persona instructions with the context block injected.
            messages (list[Message]): The transcript, oldest first, ending with the user's message.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from a raw generation response.

        Raises:
            MalformedResponseError: If the response does not contain a reply.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_chat(self, system_prompt: str, messages: list[Message]) -> str:
        """Send a generation request and return the assistant reply text.

        Transport failures and non-2xx answers are retried up to max_retries
        times with exponential backoff.

        Raises:
            ClientRequestError: If the last attempt still got a non-2xx answer.
            httpx.TransportError: If the last attempt could not reach the backend.
            MalformedResponseError: If the response does not contain a reply.
        """
        body = self.get_chat_payload(system_prompt, messages)
        async for attempt in self._retrying(self.max_retries):
            with attempt:
                response = await self.do_request(
                    method="POST",
                    endpoint=self._get_endpoint_chat(),
                    json=body,
                    raise_on_error=True,
                )
        return self.extract_chat_response(response.json())
