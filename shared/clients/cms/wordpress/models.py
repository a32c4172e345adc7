"""Internal Pydantic models for WordPress REST API responses.

Only used inside CMSClientWordpress to validate the raw listing JSON; the
rest of the application works with CMSPost.
"""

from pydantic import BaseModel, Field


class _RenderedField(BaseModel):
    rendered: str = ""


class _PostResponse(BaseModel):
    id: int | str
    title: _RenderedField = Field(default_factory=_RenderedField)
    excerpt: _RenderedField = Field(default_factory=_RenderedField)
    content: _RenderedField = Field(default_factory=_RenderedField)
    link: str = ""
