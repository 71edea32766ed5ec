"""Scraping listing pages and reconciling them with the stored table.

Submodules:
  scrape     -- HTTP fetcher, HTML parsing, product-card extraction
  reconcile  -- concurrent multi-source fetch, status index, merge
"""
