"""keeper CLI - ``keeper db ...`` and ``keeper records ...``."""
