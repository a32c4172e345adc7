from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A single environment setting a client needs, declared by the client itself.

    The key is relative to the client namespace, so EnvConfig(env_key="API_KEY")
    on the Gemini embedding client resolves to EMBED_GEMINI_API_KEY.

    Attributes:
        env_key (str): Key of the setting, without the client prefix.
        val_type (str): One of "string", "number", "bool" and "list".
        default (str | int | float | bool | list | None): Value used when unset. None marks the setting as required.
    """

    env_key: str
    val_type: str = "string"
    default: str | int | float | bool | list | None = None
