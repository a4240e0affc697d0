"""Rapprochement du grand livre des comptes et du grand livre des tiers."""

from grandlivre.fusion.moteur import (
    cle_composite,
    construire_index_tiers,
    fusionner_grands_livres,
    recaler_sur_centralisateur,
)

__all__ = [
    "cle_composite",
    "construire_index_tiers",
    "fusionner_grands_livres",
    "recaler_sur_centralisateur",
]
