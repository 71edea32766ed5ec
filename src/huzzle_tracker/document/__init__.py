"""The managed region of a markdown document.

Submodules:
  region    -- locate / render / splice the marker-delimited region
  pipeline  -- DocumentUpdater: locate -> decode -> reconcile -> encode -> splice
"""
