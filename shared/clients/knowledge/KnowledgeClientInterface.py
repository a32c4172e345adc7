from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.errors import ClientRequestError
from shared.helper.HelperConfig import HelperConfig
from shared.models.knowledge import KnowledgePost


class KnowledgeClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig, **kwargs):
        super().__init__(helper_config=helper_config, **kwargs)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "knowledge"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_post(self, post_id: str) -> str:
        """
        Returns the endpoint path of a single post record (e.g. "/documents/blog_posts/42").
        """
        pass

    @abstractmethod
    def _get_endpoint_collection(self) -> str:
        """
        Returns the endpoint path listing all post records (e.g. "/documents/blog_posts").
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_upsert_payload(self, fields: dict) -> dict:
        """
        Builds the request body writing ``fields`` into a record.
        """
        pass

    @abstractmethod
    def get_upsert_params(self, field_names: list[str]) -> list[tuple[str, str]]:
        """
        Builds the query parameters restricting the write to ``field_names``,
        so fields not listed keep their stored value.
        """
        pass

    @abstractmethod
    def get_scan_params(self, page_token: str | None) -> dict:
        """
        Builds the query parameters for one page of a full collection scan.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_post(self, raw_record: dict) -> KnowledgePost:
        """
        Converts one raw stored record into a KnowledgePost.

        Raises:
            MalformedResponseError: If the record cannot be decoded.
        """
        pass

    @abstractmethod
    def extract_scan_content(self, raw_response: dict) -> list[KnowledgePost]:
        """
        Converts one page of a scan response into KnowledgePost models.
        Records that cannot be decoded are logged and skipped.
        """
        pass

    @abstractmethod
    def extract_next_page_token(self, raw_response: dict) -> str | None:
        """
        Returns the cursor for the next scan page, or None on the last page.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_get_post(self, post_id: str) -> KnowledgePost | None:
        """Look up a cached post by its CMS identifier.

        Returns:
            KnowledgePost | None: The record, or None if it does not exist.

        Raises:
            ClientRequestError: On any non-2xx status other than 404.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_post(str(post_id)))
        if resp.status_code == 404:
            return None
        if not resp.is_success:
            raise ClientRequestError(url=str(resp.request.url), status_code=resp.status_code, body=resp.text)
        return self.extract_post(resp.json())

    async def do_upsert_post(self, post: KnowledgePost) -> None:
        """Create the record of ``post`` or merge its fields into the existing one.

        Only the fields of KnowledgePost are written; any other field stored
        on the record is left untouched.
        """
        fields = post.model_dump(exclude={"id"})
        await self.do_request(
            method="PATCH",
            json=self.get_upsert_payload(fields),
            params=self.get_upsert_params(list(fields.keys())),
            endpoint=self._get_endpoint_post(post.id),
            raise_on_error=True,
        )
        self.logging.debug("Upserted post id=%s into %s", post.id, self.get_engine_name())

    async def do_scan_posts(self) -> list[KnowledgePost]:
        """Read every cached post, following pagination until the last page.

        Returns:
            list[KnowledgePost]: All records in store order.
        """
        posts: list[KnowledgePost] = []
        page_token: str | None = None
        page = 1
        while True:
            resp = await self.do_request(
                method="GET",
                params=self.get_scan_params(page_token),
                endpoint=self._get_endpoint_collection(),
                raise_on_error=True,
            )
            raw_response = resp.json()
            posts.extend(self.extract_scan_content(raw_response))
            self.logging.debug("Scanned page %d from %s, %d posts so far", page, self.get_engine_name(), len(posts))
            page_token = self.extract_next_page_token(raw_response)
            if not page_token:
                break
            page += 1
        return posts
