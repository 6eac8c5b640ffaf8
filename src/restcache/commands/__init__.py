"""Built-in CLI sub-commands (``request``, ``cache``, ``config``, ``profile``)."""
