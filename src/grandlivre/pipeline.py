"""Traitement complet: parsing des deux grands livres puis fusion."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from grandlivre.config import ConfigGrandLivre
from grandlivre.fusion.moteur import fusionner_grands_livres, recaler_sur_centralisateur
from grandlivre.ingestion.grand_livre import (
    Lignes,
    parser_grand_livre_comptes,
    parser_grand_livre_tiers,
)
from grandlivre.models.ecritures import (
    CompteGrandLivre,
    MetadonneesEntete,
    PlanTiers,
    ResultatFusion,
    TiersGrandLivre,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultatTraitement:
    """Resultat du traitement d'une paire de grands livres."""

    metadonnees_comptes: MetadonneesEntete
    metadonnees_tiers: MetadonneesEntete
    comptes: list[CompteGrandLivre]
    tiers: list[TiersGrandLivre]
    fusion: ResultatFusion

    @property
    def vide(self) -> bool:
        """Vrai si l'un des grands livres n'a produit aucun bloc."""
        return not self.comptes or not self.tiers

    @property
    def metadonnees_par_defaut(self) -> bool:
        return (
            self.metadonnees_comptes.inferees_par_defaut
            or self.metadonnees_tiers.inferees_par_defaut
        )


def fusionner_classeurs(
    lignes_comptes: Lignes,
    lignes_tiers: Lignes,
    plan_tiers: Iterable[PlanTiers] | None = None,
    config: ConfigGrandLivre | None = None,
) -> ResultatTraitement:
    """Parse les deux exports, recale les tiers sur leur centralisateur et fusionne.

    Args:
        lignes_comptes: Premiere feuille du grand livre des comptes.
        lignes_tiers: Premiere feuille du grand livre des tiers.
        plan_tiers: Fiches de reference optionnelles.
        config: Configuration du parsing.

    Returns:
        Les grands livres parses et le resultat de la fusion.
    """
    config = config or ConfigGrandLivre()
    resultat_comptes = parser_grand_livre_comptes(lignes_comptes, config)
    resultat_tiers = parser_grand_livre_tiers(lignes_tiers, plan_tiers, config)

    if not resultat_comptes.comptes:
        logger.warning("Aucun compte detecte dans le grand livre des comptes")
    if not resultat_tiers.tiers:
        logger.warning("Aucun tiers detecte dans le grand livre des tiers")

    fusion = fusionner_grands_livres(
        resultat_comptes.comptes,
        recaler_sur_centralisateur(resultat_tiers.tiers),
    )
    return ResultatTraitement(
        metadonnees_comptes=resultat_comptes.metadonnees,
        metadonnees_tiers=resultat_tiers.metadonnees,
        comptes=resultat_comptes.comptes,
        tiers=resultat_tiers.tiers,
        fusion=fusion,
    )
