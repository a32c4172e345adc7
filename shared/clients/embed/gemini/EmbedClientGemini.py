from pydantic import ValidationError

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.gemini.models import _EmbedContentResponse
from shared.clients.errors import MalformedResponseError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class EmbedClientGemini(EmbedClientInterface):
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
        # Google keys travel as ?key=
        if self._api_key:
            return {"key": self._api_key}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/models/{self.embed_model}"

    def get_endpoint_embedding(self) -> str:
        return f"/models/{self.embed_model}:embedContent"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        """Build the Gemini embedContent request body.

        Returns:
            dict: {"model": "models/...", "content": {"parts": [{"text": ...}]}}
        """
        return {
            "model": f"models/{self.embed_model}",
            "content": {"parts": [{"text": text}]},
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        try:
            parsed = _EmbedContentResponse.model_validate(response_data)
        except ValidationError as e:
            keys = list(response_data.keys()) if isinstance(response_data, dict) else type(response_data).__name__
            raise MalformedResponseError(self.get_engine_name(), f"no embedding values in response (keys: {keys})") from e
        return parsed.embedding.values
