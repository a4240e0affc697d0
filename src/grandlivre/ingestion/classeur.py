"""Lecture de la premiere feuille d'un classeur Excel en memoire."""

from __future__ import annotations

import datetime
import io
import logging
import zipfile
from pathlib import Path
from typing import Any, BinaryIO

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from grandlivre.erreurs import ClasseurInvalide
from grandlivre.ingestion.normalisation import texte_cellule

logger = logging.getLogger(__name__)


def _valeur(cellule: Any) -> Any:
    # Les dates sont rendues comme dans l'export texte (DD/MM/YYYY)
    if isinstance(cellule, (datetime.datetime, datetime.date)):
        return cellule.strftime("%d/%m/%Y")
    return cellule


def _ouvrir(source: Path | bytes) -> BinaryIO:
    if isinstance(source, Path):
        return source.open("rb")
    return io.BytesIO(source)


def lire_feuille(source: Path | bytes) -> list[list[Any]]:
    """Lit la premiere feuille d'un classeur xlsx en tableau rectangulaire.

    Args:
        source: Chemin du fichier ou contenu binaire du classeur.

    Returns:
        Les lignes de la feuille; les cellules absentes valent None.

    Raises:
        FileNotFoundError: Si le chemin n'existe pas.
        ClasseurInvalide: Si le contenu n'est pas un classeur lisible.
    """
    if isinstance(source, Path):
        if not source.exists():
            raise FileNotFoundError(f"Classeur introuvable: {source}")
        nom = source.name
    else:
        nom = "<octets>"

    try:
        with _ouvrir(source) as flux:
            classeur = load_workbook(flux, read_only=True, data_only=True)
            try:
                feuille = classeur.worksheets[0]
                # La balise <dimension> de certains exports est fausse ou tronquee
                feuille.reset_dimensions()
                lignes = [
                    [_valeur(c) for c in ligne]
                    for ligne in feuille.iter_rows(values_only=True)
                ]
            finally:
                classeur.close()
    except (InvalidFileException, zipfile.BadZipFile, KeyError, IndexError, OSError) as e:
        raise ClasseurInvalide(f"Classeur illisible ({nom}): {e}") from e

    largeur = max((len(ligne) for ligne in lignes), default=0)
    for ligne in lignes:
        ligne.extend([None] * (largeur - len(ligne)))

    logger.info("Classeur %s: %d lignes x %d colonnes", nom, len(lignes), largeur)
    return lignes


def lignes_en_enregistrements(lignes: list[list[Any]]) -> list[dict[str, Any]]:
    """Convertit un tableau dont la premiere ligne est l'en-tete en dictionnaires.

    Les lignes entierement vides sont ignorees.
    """
    if not lignes:
        return []
    entetes = [texte_cellule(c) for c in lignes[0]]
    enregistrements = []
    for ligne in lignes[1:]:
        if all(c is None or texte_cellule(c) == "" for c in ligne):
            continue
        enregistrements.append(
            {entete: valeur for entete, valeur in zip(entetes, ligne) if entete}
        )
    return enregistrements


def lire_enregistrements(source: Path | bytes) -> list[dict[str, Any]]:
    """Lit la premiere feuille comme une table avec en-tetes."""
    return lignes_en_enregistrements(lire_feuille(source))
