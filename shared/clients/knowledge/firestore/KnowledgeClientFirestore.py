import time
from typing import Any

import httpx
from pydantic import ValidationError

from shared.clients.errors import MalformedResponseError
from shared.clients.knowledge.KnowledgeClientInterface import KnowledgeClientInterface
from shared.clients.knowledge.firestore.models import (
    _Document,
    _ListDocumentsResponse,
    _RefreshTokenResponse,
    _SignUpResponse,
)
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.knowledge import KnowledgePost

FIRESTORE_API_BASE = "https://firestore.googleapis.com/v1"
IDENTITY_API_BASE = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_API_BASE = "https://securetoken.googleapis.com/v1"
SCAN_PAGE_SIZE = 300
TOKEN_REFRESH_MARGIN = 60  # seconds before expiry
_POST_FIELDS = frozenset(KnowledgePost.model_fields) - {"id"}


def _encode_value(value: Any) -> dict:
    """Wrap a Python value in Firestore's typed value format."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [_encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": {k: _encode_value(v) for k, v in value.items()}}}
    raise TypeError(f"Cannot encode value of type {type(value).__name__} for Firestore")


def _decode_value(value: dict) -> Any:
    """Unwrap a Firestore typed value into a plain Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "arrayValue" in value:
        return [_decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return {k: _decode_value(v) for k, v in value["mapValue"].get("fields", {}).items()}
    raise ValueError(f"Unsupported Firestore value: {list(value.keys())}")


class KnowledgeClientFirestore(KnowledgeClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)
        self._base_url = self.get_config_val("BASE_URL", default=FIRESTORE_API_BASE, val_type="string")
        self._auth_url = self.get_config_val("AUTH_URL", default=IDENTITY_API_BASE, val_type="string")
        self._token_url = self.get_config_val("TOKEN_URL", default=SECURE_TOKEN_API_BASE, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._project_id = self.get_config_val("PROJECT_ID", default=None, val_type="string")
        self._database = self.get_config_val("DATABASE", default="(default)", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default="blog_posts", val_type="string")

        # anonymous identity, filled by boot()
        self._id_token: str | None = None
        self._refresh_token: str | None = None
        self._token_expires_at: float = 0.0

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Firestore"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=FIRESTORE_API_BASE),
            EnvConfig(env_key="AUTH_URL", val_type="string", default=IDENTITY_API_BASE),
            EnvConfig(env_key="TOKEN_URL", val_type="string", default=SECURE_TOKEN_API_BASE),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="PROJECT_ID", val_type="string", default=None),
            EnvConfig(env_key="DATABASE", val_type="string", default="(default)"),
            EnvConfig(env_key="COLLECTION", val_type="string", default="blog_posts"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._id_token:
            return {"Authorization": f"Bearer {self._id_token}"}
        return {}

    def _get_auth_params(self) -> dict:
        if self._api_key:
            return {"key": self._api_key}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return f"{self._base_url.rstrip('/')}/projects/{self._project_id}/databases/{self._database}"

    def _get_endpoint_healthcheck(self) -> str:
        return f"/documents/{self._collection_name}?pageSize=1"

    def _get_endpoint_post(self, post_id: str) -> str:
        return f"/documents/{self._collection_name}/{post_id}"

    def _get_endpoint_collection(self) -> str:
        return f"/documents/{self._collection_name}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, fields: dict) -> dict:
        return {"fields": {name: _encode_value(value) for name, value in fields.items()}}

    def get_upsert_params(self, field_names: list[str]) -> list[tuple[str, str]]:
        # an update mask turns PATCH into a merge that creates missing documents
        return [("updateMask.fieldPaths", name) for name in field_names]

    def get_scan_params(self, page_token: str | None) -> dict:
        params: dict = {"pageSize": SCAN_PAGE_SIZE}
        if page_token:
            params["pageToken"] = page_token
        return params

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _decode_document(self, document: _Document) -> KnowledgePost:
        try:
            # fields other writers merged into the document are ignored
            fields = {
                name: _decode_value(value)
                for name, value in document.fields.items()
                if name in _POST_FIELDS
            }
        except (ValueError, TypeError, AttributeError) as e:
            raise MalformedResponseError(self.get_engine_name(), f"undecodable document {document.name}: {e}") from e
        fields["id"] = document.name.rsplit("/", 1)[-1]
        try:
            return KnowledgePost.model_validate(fields)
        except ValidationError as e:
            raise MalformedResponseError(self.get_engine_name(), f"document {document.name} is not a post record") from e

    def extract_post(self, raw_record: dict) -> KnowledgePost:
        try:
            document = _Document.model_validate(raw_record)
        except ValidationError as e:
            raise MalformedResponseError(self.get_engine_name(), "response is not a document") from e
        return self._decode_document(document)

    def extract_scan_content(self, raw_response: dict) -> list[KnowledgePost]:
        try:
            listing = _ListDocumentsResponse.model_validate(raw_response)
        except ValidationError as e:
            raise MalformedResponseError(self.get_engine_name(), "response is not a document listing") from e
        posts = []
        for document in listing.documents:
            try:
                posts.append(self._decode_document(document))
            except MalformedResponseError as e:
                self.logging.warning("Skipping unreadable %s document: %s", self.get_engine_name(), e)
        return posts

    def extract_next_page_token(self, raw_response: dict) -> str | None:
        return raw_response.get("nextPageToken") or None

    ##########################################
    ################# AUTH ###################
    ##########################################

    async def boot(self) -> None:
        """Open the HTTP client and obtain an anonymous identity token."""
        await super().boot()
        if self._api_key:
            await self.do_sign_in_anonymously()
        else:
            self.logging.warning("No API key for %s. Requests are sent unauthenticated.", self.get_engine_name())

    async def do_sign_in_anonymously(self) -> None:
        """Create an anonymous identity and keep its ID token for later requests.

        Raises:
            ClientRequestError: If the identity service rejects the sign-up.
            MalformedResponseError: If the answer carries no token.
        """
        resp = await super().do_request(
            method="POST",
            url=f"{self._auth_url.rstrip('/')}/accounts:signUp",
            json={"returnSecureToken": True},
            raise_on_error=True,
        )
        try:
            parsed = _SignUpResponse.model_validate(resp.json())
        except ValidationError as e:
            raise MalformedResponseError("identitytoolkit", "sign-up response carries no token") from e
        self._store_token(parsed.idToken, parsed.refreshToken, parsed.expiresIn)
        self.logging.info("Signed in anonymously to %s project '%s'", self.get_engine_name(), self._project_id)

    async def _do_refresh_token(self) -> None:
        # the expired token must not be sent along
        self._id_token = None
        resp = await super().do_request(
            method="POST",
            url=f"{self._token_url.rstrip('/')}/token",
            data={"grant_type": "refresh_token", "refresh_token": self._refresh_token},
            raise_on_error=True,
        )
        try:
            parsed = _RefreshTokenResponse.model_validate(resp.json())
        except ValidationError as e:
            raise MalformedResponseError("securetoken", "refresh response carries no token") from e
        self._store_token(parsed.id_token, parsed.refresh_token, parsed.expires_in)
        self.logging.debug("Refreshed anonymous %s token", self.get_engine_name())

    def _store_token(self, id_token: str, refresh_token: str, expires_in: int) -> None:
        self._id_token = id_token
        self._refresh_token = refresh_token
        self._token_expires_at = time.monotonic() + int(expires_in)

    async def do_request(self, *args, **kwargs) -> httpx.Response:
        """Refresh an expiring identity token before delegating to the base request."""
        if self._refresh_token and time.monotonic() >= self._token_expires_at - TOKEN_REFRESH_MARGIN:
            await self._do_refresh_token()
        return await super().do_request(*args, **kwargs)
