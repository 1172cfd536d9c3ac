"""ark-manager - terminal menu for ARK servers and their mods."""

__version__ = "0.1.0"
