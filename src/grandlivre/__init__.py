"""GrandLivre - Fusion des grands livres comptes et tiers."""

__version__ = "0.1.0"
