from typing import Literal, Optional

from pydantic import BaseModel, Field, HttpUrl, model_validator


class DocumentSource(BaseModel):
    """One document to compare, given inline or by URL."""

    label: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Name used for the document in the response. Defaults to the URL.",
    )
    html: Optional[str] = Field(default=None, description="Raw HTML of the document.")
    url: Optional[HttpUrl] = Field(default=None, description="Public URL to fetch the document from.")
    render_mode: Literal["http", "browser"] = "http"
    """How a *url* document is fetched.

    ``"http"`` (default)
        Plain HTTP GET.  Fast; sees only the server-sent markup.

    ``"browser"``
        Headless Chromium rendering, for pages whose structure is built
        client-side.  Ignored for inline *html*.
    """
    wait_ms: int = Field(
        default=0,
        ge=0,
        le=10_000,
        description="Extra milliseconds to wait after load in browser mode (max 10 000).",
    )

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "DocumentSource":
        if (self.html is None) == (self.url is None):
            raise ValueError("Provide exactly one of 'html' or 'url'.")
        return self
