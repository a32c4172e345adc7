"""Generic CMS post model, independent of the CMS backend."""

from pydantic import BaseModel


class CMSPost(BaseModel):
    """
    A published post as returned by a CMS client, with rendered HTML fields
    flattened to plain strings. Markup is still present; sanitizing happens
    in the synchroniser.
    """
    engine: str
    id: str
    title: str = ""
    excerpt: str = ""
    content: str = ""
    link: str = ""
