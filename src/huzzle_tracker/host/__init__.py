"""Host shim standing in for the editor: buffers, command registry, CLI.

Submodules:
  plugin  -- DocumentBuffer, FileBuffer, CommandRegistry, HuzzlesTracker
  cli     -- ``huzzles-tracker`` command-line entry point
"""
