from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.cms.models.Post import CMSPost
from shared.helper.HelperConfig import HelperConfig


class CMSClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "cms"

    @abstractmethod
    def get_page_size(self) -> int:
        """
        Returns the number of posts fetched per sync run.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_posts(self, page_size: int) -> str:
        """
        Returns the endpoint path of the public post listing.

        Args:
            page_size (int): The number of posts to request.

        Returns:
            str: The endpoint path (e.g. "/wp-json/wp/v2/posts?per_page=20")
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def _parse_endpoint_posts(self, response: list | dict) -> list[CMSPost]:
        """
        Converts the raw listing response into CMSPost models.

        Raises:
            MalformedResponseError: If the response does not have the expected shape.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_posts(self) -> list[CMSPost]:
        """
        Fetches the most recent posts, up to the configured page size.

        Returns:
            list[CMSPost]: Posts in the order the CMS lists them.

        Raises:
            ClientRequestError: If the CMS answers with a non-2xx status.
            MalformedResponseError: If the listing cannot be parsed.
        """
        page_size = self.get_page_size()
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_posts(page_size=page_size), raise_on_error=True)
        posts = self._parse_endpoint_posts(resp.json())
        self.logging.info("Fetched %d posts (page size %d) from %s", len(posts), page_size, self.get_engine_name())
        return posts
