"""Modeles de donnees GrandLivre."""

from grandlivre.models.ecritures import (
    CompteEnrichi,
    CompteGrandLivre,
    MetadonneesEntete,
    PlanTiers,
    ResultatFusion,
    ResultatGrandLivreComptes,
    ResultatGrandLivreTiers,
    StatistiquesFusion,
    StatutJointure,
    TiersGrandLivre,
    Transaction,
    TransactionEnrichie,
)

__all__ = [
    "CompteEnrichi",
    "CompteGrandLivre",
    "MetadonneesEntete",
    "PlanTiers",
    "ResultatFusion",
    "ResultatGrandLivreComptes",
    "ResultatGrandLivreTiers",
    "StatistiquesFusion",
    "StatutJointure",
    "TiersGrandLivre",
    "Transaction",
    "TransactionEnrichie",
]
