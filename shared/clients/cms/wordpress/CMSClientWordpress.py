from pydantic import TypeAdapter, ValidationError

from shared.clients.cms.CMSClientInterface import CMSClientInterface
from shared.clients.cms.models.Post import CMSPost
from shared.clients.cms.wordpress.models import _PostResponse
from shared.clients.errors import MalformedResponseError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

_POST_LIST_ADAPTER = TypeAdapter(list[_PostResponse])


class CMSClientWordpress(CMSClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._page_size = int(self.get_config_val("PAGE_SIZE", default=20, val_type="number"))
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Wordpress"

    def get_page_size(self) -> int:
        return self._page_size

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="PAGE_SIZE", val_type="number", default=20),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # the listing is public; an application password is optional
        if self._api_key:
            return {"Authorization": f"Basic {self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/wp-json/"

    def _get_endpoint_posts(self, page_size: int) -> str:
        return f"/wp-json/wp/v2/posts?per_page={page_size}"

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_endpoint_posts(self, response: list | dict) -> list[CMSPost]:
        try:
            rows = _POST_LIST_ADAPTER.validate_python(response)
        except ValidationError as e:
            raise MalformedResponseError(self.get_engine_name(), f"unexpected post listing: {e.error_count()} validation error(s)") from e

        return [
            CMSPost(
                engine=self.get_engine_name(),
                id=str(row.id),
                title=row.title.rendered,
                excerpt=row.excerpt.rendered,
                content=row.content.rendered,
                link=row.link,
            )
            for row in rows
        ]
