"""Markdown table decoding and encoding for the managed catalog region.

Submodules:
  patterns  -- compiled regex patterns for image links and cell escaping
  schema    -- CatalogItem Pydantic model
  codec     -- TableCodec (markdown <-> rows) and row -> CatalogItem recovery
"""
