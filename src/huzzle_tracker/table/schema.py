"""Pydantic model for one row of the managed catalog table."""

from pydantic import BaseModel, Field


class CatalogItem(BaseModel):
    """One puzzle from the catalog.

    ``name`` is the only identity that survives between runs, so it is the
    key used to carry ``status`` forward.  Every other field is overwritten
    by the freshest scrape.
    """

    level: str
    index: str
    name: str
    image_links: list[str] = Field(default_factory=list)
    status: str = ""
