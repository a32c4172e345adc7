from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig

# client type -> (class name prefix, default engine)
CLIENT_TYPES: dict[str, tuple[str, str]] = {
    "cms": ("CMS", "wordpress"),
    "embed": ("Embed", "gemini"),
    "llm": ("LLM", "gemini"),
    "knowledge": ("Knowledge", "firestore"),
}


class ClientManager:
    """
    Instantiates the client of one type based on the ``<TYPE>_ENGINE`` setting.

    The engine name selects the module ``shared.clients.<type>.<engine>.<Prefix>Client<Engine>``,
    e.g. EMBED_ENGINE=gemini loads ``shared.clients.embed.gemini.EmbedClientGemini``.
    """

    def __init__(self, helper_config: HelperConfig, client_type: str):
        if client_type not in CLIENT_TYPES:
            raise ValueError(f"Unknown client type '{client_type}'. Supported: {', '.join(CLIENT_TYPES)}")
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client_type = client_type
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the engine for this client type from ENV configuration.

        Returns:
            str: The engine name, capitalized (e.g. "Gemini").
        """
        _, default_engine = CLIENT_TYPES[self.client_type]
        engine = self.helper_config.get_string_val(f"{self.client_type.upper()}_ENGINE", default=default_engine)
        if not engine.strip():
            raise ValueError(f"No {self.client_type.upper()} engine specified in configuration.")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> ClientInterface:
        """
        Imports and instantiates the client class for the configured engine.

        Raises:
            ValueError: If the engine has no matching client module or class.
        """
        prefix, _ = CLIENT_TYPES[self.client_type]
        engine = self._get_engine_from_env()
        class_name = f"{prefix}Client{engine}"
        try:
            module = __import__(
                f"shared.clients.{self.client_type}.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self.client_type.upper()} engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client for engine: %s", self.client_type.upper(), engine)
        return client

    def get_client(self) -> ClientInterface:
        """
        Returns the instantiated client.
        """
        return self.client
