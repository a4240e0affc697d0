"""Plan des tiers: table de reference des comptes tiers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from grandlivre.ingestion.normalisation import texte_cellule
from grandlivre.models.ecritures import PlanTiers

logger = logging.getLogger(__name__)

# En-tete de l'export du plan tiers -> champ du modele
_ENTETES: dict[str, str] = {
    "Compte tiers": "Compte_tiers",
    "Type": "Type",
    "Intitulé du tiers": "Intitule_du_tiers",
    "Centralisateur": "Centralisateur",
    "Periode": "Periode",
    "Période": "Periode",
}


def _valeur(enregistrement: Mapping[str, Any], champ: str) -> str:
    for entete, cible in _ENTETES.items():
        if cible == champ and entete in enregistrement:
            return texte_cellule(enregistrement[entete])
    return texte_cellule(enregistrement.get(champ))


def charger_plan_tiers(enregistrements: Iterable[Mapping[str, Any]]) -> list[PlanTiers]:
    """Convertit les lignes d'un plan tiers (cles = en-tetes) en fiches.

    Accepte les en-tetes de l'export ("Compte tiers", "Intitulé du tiers"...)
    ou les noms de champs (Compte_tiers, Intitule_du_tiers...). Les lignes sans
    Compte tiers sont ignorees.
    """
    fiches: list[PlanTiers] = []
    for enregistrement in enregistrements:
        code = _valeur(enregistrement, "Compte_tiers")
        if not code:
            logger.warning(
                "Plan tiers: fiche ignoree, Compte tiers vide (%s)",
                _valeur(enregistrement, "Intitule_du_tiers") or "sans intitule",
            )
            continue
        fiches.append(
            PlanTiers(
                Compte_tiers=code,
                Type=_valeur(enregistrement, "Type"),
                Intitule_du_tiers=_valeur(enregistrement, "Intitule_du_tiers"),
                Centralisateur=_valeur(enregistrement, "Centralisateur"),
                Periode=_valeur(enregistrement, "Periode"),
            )
        )
    logger.info("Plan tiers: %d fiches chargees", len(fiches))
    return fiches


def indexer_plan_tiers(fiches: Iterable[PlanTiers]) -> dict[str, PlanTiers]:
    """Index Compte_tiers -> fiche; la derniere fiche gagne en cas de doublon."""
    return {fiche.Compte_tiers: fiche for fiche in fiches}


def enrichir_entete_tiers(
    code: str,
    libelle: str,
    centralisateur: str,
    periode: str,
    plan: Mapping[str, PlanTiers],
    type_defaut: str = "Non défini",
) -> dict[str, str]:
    """Retourne les champs d'en-tete d'un tiers, completes par le plan tiers.

    Une valeur non vide du plan tiers remplace la valeur lue dans le grand
    livre. Sans fiche, le Type vaut type_defaut et l'intitule est le libelle
    lu sur la ligne d'en-tete du bloc.
    """
    fiche = plan.get(code)
    if fiche is None:
        return {
            "Type": type_defaut,
            "Intitule_du_tiers": libelle,
            "Centralisateur": centralisateur,
            "Periode": periode,
        }
    return {
        "Type": fiche.Type or type_defaut,
        "Intitule_du_tiers": fiche.Intitule_du_tiers or libelle,
        "Centralisateur": fiche.Centralisateur or centralisateur,
        "Periode": fiche.Periode or periode,
    }
