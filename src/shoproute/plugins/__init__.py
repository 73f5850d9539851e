"""Plugin package initialiser.

Keep this file lightweight; concrete plugin modules (``logging``,
``permission``) self-register with ``Router.register_plugin`` when imported
(see ``shoproute.__init__`` for the eager imports).
"""

__all__: list[str] = []
