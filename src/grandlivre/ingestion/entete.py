"""Extraction de l'entite et de la periode depuis l'en-tete d'un export."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from grandlivre.config import DefautsEntete
from grandlivre.ingestion.normalisation import texte_cellule
from grandlivre.models.ecritures import MetadonneesEntete

logger = logging.getLogger(__name__)

_EXCLUSIONS_ENTITE = ("Date", "Impression", "©")
_MARQUEUR_PERIODE = "Période du"
_DATE_FIN = re.compile(r"(\d{2})/(\d{2})/(\d{2,4})")


def _cellule(ligne: Sequence[Any] | None, index: int) -> Any:
    if not ligne or index < 0 or index >= len(ligne):
        return None
    return ligne[index]


def _detecter_entite(ligne: Sequence[Any]) -> str | None:
    premiere = texte_cellule(_cellule(ligne, 0))
    if not premiere:
        return None
    if any(exclu in premiere for exclu in _EXCLUSIONS_ENTITE):
        return None
    return premiere


def _detecter_periode(
    lignes: Sequence[Sequence[Any]], i: int
) -> tuple[str, str] | None:
    """Cherche "Période du" sur la ligne i et lit la date de fin en dessous.

    Returns:
        Tuple (periode YYYYMM, date_gl) ou None.
    """
    ligne = lignes[i] or []
    for idx, cellule in enumerate(ligne):
        if _MARQUEUR_PERIODE not in texte_cellule(cellule):
            continue
        suivante = lignes[i + 1] if i + 1 < len(lignes) else None
        date_fin = texte_cellule(_cellule(suivante, idx + 1))
        match = _DATE_FIN.search(date_fin)
        if match:
            jour, mois, annee = match.groups()
            if len(annee) == 2:
                annee = f"20{annee}"
            return f"{annee}{mois}", date_fin
    return None


def extraire_metadonnees(
    lignes: Sequence[Sequence[Any]],
    defauts: DefautsEntete | None = None,
    nb_lignes: int = 10,
) -> MetadonneesEntete:
    """Lit l'entite et la periode dans les premieres lignes d'une feuille.

    L'entite est la premiere cellule non vide de la colonne 0 qui ne contient
    ni "Date", ni "Impression", ni "©". La periode est lue sur la ligne sous
    la cellule "Période du", une colonne plus a droite.

    Args:
        lignes: Lignes de la feuille (listes de cellules).
        defauts: Valeurs de repli si la detection echoue.
        nb_lignes: Nombre de lignes d'en-tete examinees.

    Returns:
        Les metadonnees; champs_par_defaut liste les valeurs de repli utilisees.
    """
    defauts = defauts or DefautsEntete()
    entite: str | None = None
    periode: tuple[str, str] | None = None

    for i in range(min(nb_lignes, len(lignes))):
        ligne = lignes[i]
        if not ligne:
            continue
        if entite is None:
            entite = _detecter_entite(ligne)
        if periode is None:
            periode = _detecter_periode(lignes, i)

    champs_par_defaut: list[str] = []
    if entite is None:
        entite = defauts.entite
        champs_par_defaut.append("entite")
    if periode is None:
        periode = (defauts.periode, defauts.date_gl)
        champs_par_defaut.extend(["periode", "date_gl"])

    if champs_par_defaut:
        logger.warning(
            "En-tete incomplet, valeurs par defaut utilisees pour: %s",
            ", ".join(champs_par_defaut),
        )

    return MetadonneesEntete(
        entite=entite,
        periode=periode[0],
        date_gl=periode[1],
        champs_par_defaut=champs_par_defaut,
    )
