"""Export des grands livres (JSON imbrique, tables aplaties, xlsx)."""
