"""Detection du type d'un fichier comptable d'apres son nom.

Chaque categorie a une liste de mots-cles; le score d'une categorie est la
somme des longueurs des mots-cles presents dans le nom normalise. Le meilleur
score strictement positif gagne, la premiere categorie l'emporte en cas
d'egalite.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum

from pydantic import BaseModel, Field, computed_field

logger = logging.getLogger(__name__)


class TypeFichier(str, Enum):
    """Les cinq categories de fichiers d'un lot comptable."""

    GRAND_LIVRE_COMPTES = "GRAND_LIVRE_COMPTES"
    GRAND_LIVRE_TIERS = "GRAND_LIVRE_TIERS"
    PLAN_COMPTES = "PLAN_COMPTES"
    PLAN_TIERS = "PLAN_TIERS"
    CODE_JOURNAL = "CODE_JOURNAL"


NON_DETECTE = "undetected"

LIBELLES_TYPES: dict[TypeFichier, str] = {
    TypeFichier.GRAND_LIVRE_COMPTES: "Grand Livre des Comptes",
    TypeFichier.GRAND_LIVRE_TIERS: "Grand Livre des Tiers",
    TypeFichier.PLAN_COMPTES: "Plan Comptable",
    TypeFichier.PLAN_TIERS: "Plan des Tiers",
    TypeFichier.CODE_JOURNAL: "Code Journal",
}

MOTS_CLES: dict[TypeFichier, tuple[str, ...]] = {
    TypeFichier.GRAND_LIVRE_COMPTES: ("grand", "livre", "compte", "glcompte"),
    TypeFichier.GRAND_LIVRE_TIERS: ("grand", "livre", "tiers", "gltiers"),
    TypeFichier.PLAN_COMPTES: ("plan", "compte", "plancompte"),
    TypeFichier.PLAN_TIERS: ("plan", "tiers", "plantiers"),
    TypeFichier.CODE_JOURNAL: ("code", "journal", "codejournal"),
}


def normaliser_nom(nom_fichier: str) -> str:
    """Minuscules, chiffres/_/-/. remplaces par des espaces, bords retires."""
    return re.sub(r"[0-9_\-.]+", " ", nom_fichier.lower()).strip()


def _mots_cles(
    mots_cles: Mapping[str, Sequence[str]] | None,
) -> dict[TypeFichier, Sequence[str]]:
    if mots_cles is None:
        return dict(MOTS_CLES)
    return {TypeFichier(type_): mots for type_, mots in mots_cles.items()}


def scores_fichier(
    nom_fichier: str,
    mots_cles: Mapping[str, Sequence[str]] | None = None,
) -> dict[TypeFichier, int]:
    """Calcule le score de chaque categorie pour un nom de fichier."""
    nom = normaliser_nom(nom_fichier)
    return {
        type_: sum(len(mot) for mot in mots if mot in nom)
        for type_, mots in _mots_cles(mots_cles).items()
    }


def classer_fichier(
    nom_fichier: str,
    mots_cles: Mapping[str, Sequence[str]] | None = None,
) -> str:
    """Retourne la categorie detectee (valeur de TypeFichier) ou NON_DETECTE.

    Args:
        nom_fichier: Nom du fichier (avec ou sans extension).
        mots_cles: Table categorie -> mots-cles; l'ordre des cles fixe la
            priorite en cas d'egalite. Par defaut, MOTS_CLES.
    """
    meilleur: TypeFichier | None = None
    meilleur_score = 0
    for type_, score in scores_fichier(nom_fichier, mots_cles).items():
        if score > meilleur_score:
            meilleur, meilleur_score = type_, score

    if meilleur is None:
        logger.debug("Type non detecte pour %s", nom_fichier)
        return NON_DETECTE
    return meilleur.value


class ResultatValidationLot(BaseModel):
    """Verification qu'un lot contient exactement un fichier de chaque type."""

    types: dict[str, str] = Field(description="Nom de fichier -> type detecte")
    manquants: list[str] = Field(default_factory=list)
    doublons: list[str] = Field(default_factory=list)
    non_detectes: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def est_valide(self) -> bool:
        return (
            len(self.types) == len(TypeFichier)
            and not self.manquants
            and not self.doublons
            and not self.non_detectes
        )


def valider_lot(
    noms_fichiers: Iterable[str],
    mots_cles: Mapping[str, Sequence[str]] | None = None,
) -> ResultatValidationLot:
    """Classe chaque fichier d'un lot et verifie les cinq types obligatoires.

    Args:
        noms_fichiers: Noms des fichiers televerses.
        mots_cles: Table de mots-cles optionnelle (voir classer_fichier).

    Returns:
        Le detail de la classification; est_valide indique si le lot peut
        etre traite.
    """
    types: dict[str, str] = {}
    non_detectes: list[str] = []
    compteur: dict[str, int] = {}

    for nom in noms_fichiers:
        type_detecte = classer_fichier(nom, mots_cles)
        types[nom] = type_detecte
        if type_detecte == NON_DETECTE:
            non_detectes.append(nom)
        else:
            compteur[type_detecte] = compteur.get(type_detecte, 0) + 1

    manquants = [t.value for t in TypeFichier if t.value not in compteur]
    doublons = [t.value for t in TypeFichier if compteur.get(t.value, 0) > 1]

    return ResultatValidationLot(
        types=types,
        manquants=manquants,
        doublons=doublons,
        non_detectes=non_detectes,
    )
