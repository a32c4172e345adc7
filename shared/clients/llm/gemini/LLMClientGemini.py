from pydantic import ValidationError

from shared.clients.errors import MalformedResponseError
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.gemini.models import _GenerateContentResponse
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import Message
from shared.models.config import EnvConfig

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class LLMClientGemini(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)
        self._base_url = self.get_config_val("BASE_URL", default=GEMINI_API_BASE, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def has_credentials(self) -> bool:
        return bool(self._api_key)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=GEMINI_API_BASE),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {}

    def _get_auth_params(self) -> dict:
        if self._api_key:
            return {"key": self._api_key}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/models/{self.chat_model}"

    def _get_endpoint_chat(self) -> str:
        return f"/models/{self.chat_model}:generateContent"

    ################ PAYLOAD BUILDER ##################
    def get_chat_payload(self, system_prompt: str, messages: list[Message]) -> dict:
        """Build the Gemini generateContent request body.

        Assistant turns are sent with Gemini's "model" role.
        """
        return {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [
                {
                    "role": "model" if message.role == "assistant" else "user",
                    "parts": [{"text": message.content}],
                }
                for message in messages
            ],
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_chat_response(self, response_data: dict) -> str:
        try:
            parsed = _GenerateContentResponse.model_validate(response_data)
        except ValidationError as e:
            raise MalformedResponseError(self.get_engine_name(), "generateContent response does not match the expected schema") from e

        if not parsed.candidates or parsed.candidates[0].content is None:
            raise MalformedResponseError(self.get_engine_name(), "no candidates in generateContent response")

        text = "".join(part.text or "" for part in parsed.candidates[0].content.parts)
        if not text.strip():
            reason = parsed.candidates[0].finishReason or "unknown"
            raise MalformedResponseError(self.get_engine_name(), f"empty reply (finish reason: {reason})")
        return text
