"""Command-line entry points and debug helpers.

:mod:`monitor` runs a headless session against the API or a replay file and
logs the status tiles; :mod:`debug` holds the ``SCRUBMON_DEBUG`` timing hooks.
"""
