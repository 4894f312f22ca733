"""
inventory_kernel -- persistence, domain types and services for stock and
moving-average cost.

Layers (inner to outer): logging_config / exceptions -> db -> domain ->
models -> selectors -> services.  The kernel never imports
inventory_services or inventory_config.
"""
