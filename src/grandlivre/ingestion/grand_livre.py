"""Parsing des exports grand livre des comptes et grand livre des tiers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from grandlivre.config import ConfigGrandLivre
from grandlivre.ingestion.entete import extraire_metadonnees
from grandlivre.ingestion.plan_tiers import enrichir_entete_tiers, indexer_plan_tiers
from grandlivre.ingestion.scanner import (
    DISPOSITION_COMPTES,
    DISPOSITION_TIERS,
    scanner_blocs,
)
from grandlivre.models.ecritures import (
    CompteGrandLivre,
    PlanTiers,
    ResultatGrandLivreComptes,
    ResultatGrandLivreTiers,
    TiersGrandLivre,
)

logger = logging.getLogger(__name__)

Lignes = Sequence[Sequence[Any] | None]


def parser_grand_livre_comptes(
    lignes: Lignes,
    config: ConfigGrandLivre | None = None,
) -> ResultatGrandLivreComptes:
    """Extrait les comptes et leurs ecritures d'un grand livre des comptes.

    Args:
        lignes: Lignes de la premiere feuille de l'export.
        config: Valeurs par defaut de l'en-tete.

    Returns:
        Metadonnees et comptes; une liste vide si aucun compte n'est detecte.
    """
    config = config or ConfigGrandLivre()
    metadonnees = extraire_metadonnees(lignes, config.defauts, config.lignes_entete)
    blocs = scanner_blocs(lignes, DISPOSITION_COMPTES, metadonnees)

    comptes = [
        CompteGrandLivre(
            Numero_Compte=bloc.code,
            Libelle_Compte=bloc.libelle,
            Periode=metadonnees.periode,
            Transactions=bloc.transactions,
        )
        for bloc in blocs
    ]
    return ResultatGrandLivreComptes(metadonnees=metadonnees, comptes=comptes)


def parser_grand_livre_tiers(
    lignes: Lignes,
    plan_tiers: Iterable[PlanTiers] | None = None,
    config: ConfigGrandLivre | None = None,
) -> ResultatGrandLivreTiers:
    """Extrait les tiers et leurs ecritures d'un grand livre des tiers.

    Les en-tetes des tiers presents dans le plan tiers sont remplaces par les
    valeurs de reference (Type, intitule, centralisateur, periode).

    Args:
        lignes: Lignes de la premiere feuille de l'export.
        plan_tiers: Fiches de reference optionnelles.
        config: Valeurs par defaut de l'en-tete et type de tiers par defaut.

    Returns:
        Metadonnees et tiers; une liste vide si aucun tiers n'est detecte.
    """
    config = config or ConfigGrandLivre()
    plan = indexer_plan_tiers(plan_tiers or [])
    metadonnees = extraire_metadonnees(lignes, config.defauts, config.lignes_entete)
    blocs = scanner_blocs(lignes, DISPOSITION_TIERS, metadonnees)

    tiers: list[TiersGrandLivre] = []
    nb_references = 0
    for bloc in blocs:
        if bloc.code in plan:
            nb_references += 1
        champs = enrichir_entete_tiers(
            bloc.code,
            bloc.libelle,
            bloc.entete.get("centralisateur", ""),
            metadonnees.periode,
            plan,
            config.type_tiers_defaut,
        )
        tiers.append(
            TiersGrandLivre(Compte_tiers=bloc.code, Transactions=bloc.transactions, **champs)
        )

    if plan:
        logger.info("Plan tiers: %d/%d tiers reconnus", nb_references, len(tiers))
    return ResultatGrandLivreTiers(metadonnees=metadonnees, tiers=tiers)
