"""Normalisation des cellules d'export: texte, dates DDMMYY et montants."""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

# Valeur retournee pour une date illisible; le scan du bloc continue
DATE_INVALIDE = "0000-00-00"

_ESPACES = re.compile(r"\s+")


def texte_cellule(valeur: Any) -> str:
    """Convertit une cellule en texte nettoye.

    None devient "", un float entier perd sa partie decimale (401000.0 -> "401000").
    """
    if valeur is None:
        return ""
    if isinstance(valeur, float) and valeur.is_integer():
        return str(int(valeur))
    return str(valeur).strip()


def est_vide(valeur: Any) -> bool:
    """Vrai si la cellule est nulle ou ne contient que des espaces."""
    return texte_cellule(valeur) == ""


def normaliser_date(jeton: Any) -> str:
    """Convertit un jeton DDMMYY en date ISO YYYY-MM-DD.

    L'annee sur deux chiffres est toujours prefixee par "20".

    Args:
        jeton: Valeur de la premiere colonne d'une ligne d'ecriture.

    Returns:
        La date ISO, ou DATE_INVALIDE si le jeton n'est pas une date valide.
    """
    chiffres = re.sub(r"\D", "", texte_cellule(jeton))
    if len(chiffres) != 6:
        logger.debug("Jeton de date illisible: %r", jeton)
        return DATE_INVALIDE

    jour, mois, annee = chiffres[0:2], chiffres[2:4], chiffres[4:6]
    try:
        date = datetime.strptime(f"{jour}{mois}20{annee}", "%d%m%Y").date()
    except ValueError:
        logger.debug("Date hors calendrier: %r", jeton)
        return DATE_INVALIDE
    return date.isoformat()


def normaliser_montant(valeur: Any) -> float:
    """Convertit un montant au format francais en float.

    - Les espaces (y compris insecables) sont des separateurs de milliers
    - La virgule est le separateur decimal; si elle est presente, les points
      sont des separateurs de milliers
    - Vide, "-", None ou texte non numerique donnent 0.0

    Args:
        valeur: Cellule brute (texte ou nombre).

    Returns:
        Le montant en float, signe conserve.
    """
    if valeur is None or isinstance(valeur, bool):
        return 0.0
    if isinstance(valeur, (int, float)):
        return float(valeur) if math.isfinite(valeur) else 0.0

    texte = _ESPACES.sub("", str(valeur))
    if not texte or texte == "-":
        return 0.0

    if "," in texte:
        texte = texte.replace(".", "").replace(",", ".")

    try:
        montant = float(texte)
    except ValueError:
        return 0.0
    return montant if math.isfinite(montant) else 0.0
