"""
vault_allocator.reporting — terminal formatting and flat-file export.

Modules:
  formatters — ASCII decision table and percentage helpers for the CLI.
  export     — decision flattening plus CSV/JSON writers.
"""
