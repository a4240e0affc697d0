"""Scanner generique des blocs d'un export de grand livre.

Un export de grand livre est une suite de blocs: une ligne d'en-tete (code du
compte ou du tiers, libelle), des lignes d'ecritures dont la premiere colonne
est une date DDMMYY, puis une ligne "Total". La position des colonnes depend
du type d'export et est decrite par une DispositionGrandLivre.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from grandlivre.ingestion.normalisation import (
    est_vide,
    normaliser_date,
    normaliser_montant,
    texte_cellule,
)
from grandlivre.models.ecritures import MetadonneesEntete, Transaction

logger = logging.getLogger(__name__)

_MARQUEUR_TOTAL = "Total"
_DATE_ECRITURE = re.compile(r"^\d{6}$")


@dataclass(frozen=True)
class DispositionGrandLivre:
    """Position des colonnes d'un type d'export de grand livre."""

    nom: str
    motif_code: re.Pattern[str]
    colonne_sentinelle: int
    colonne_libelle: int
    colonne_total: int
    colonne_date: int
    colonne_journal: int
    colonne_piece: int
    colonne_libelle_ecriture: int
    colonne_debit: int
    colonne_credit: int
    colonne_solde: int
    # Colonnes supplementaires de la ligne d'en-tete: nom -> index
    colonnes_entete: tuple[tuple[str, int], ...] = ()


DISPOSITION_COMPTES = DispositionGrandLivre(
    nom="comptes",
    motif_code=re.compile(r"^\d{6}$"),
    colonne_sentinelle=1,
    colonne_libelle=2,
    colonne_total=2,
    colonne_date=0,
    colonne_journal=1,
    colonne_piece=2,
    colonne_libelle_ecriture=5,
    colonne_debit=11,
    colonne_credit=14,
    colonne_solde=17,
)

DISPOSITION_TIERS = DispositionGrandLivre(
    nom="tiers",
    motif_code=re.compile(r"^[0-9A-Z]+$"),
    colonne_sentinelle=1,
    colonne_libelle=2,
    colonne_total=3,
    colonne_date=0,
    colonne_journal=1,
    colonne_piece=2,
    colonne_libelle_ecriture=4,
    colonne_debit=9,
    colonne_credit=11,
    colonne_solde=14,
    colonnes_entete=(("centralisateur", 3),),
)


@dataclass
class Bloc:
    """Un bloc detecte: en-tete et ecritures, avant conversion en modele."""

    code: str
    libelle: str
    entete: dict[str, str] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)


def _cellule(ligne: Sequence[Any], index: int) -> Any:
    return ligne[index] if index < len(ligne) else None


def _texte(ligne: Sequence[Any], index: int) -> str:
    return texte_cellule(_cellule(ligne, index))


def _est_code_sans_sentinelle(ligne: Sequence[Any], disposition: DispositionGrandLivre) -> bool:
    code = _texte(ligne, 0)
    return (
        bool(code)
        and disposition.motif_code.match(code) is not None
        and est_vide(_cellule(ligne, disposition.colonne_sentinelle))
    )


def est_debut_bloc(ligne: Sequence[Any], disposition: DispositionGrandLivre) -> bool:
    """Vrai si la ligne ouvre un bloc (code, sentinelle vide, libelle sans "Total")."""
    if not ligne or not _est_code_sans_sentinelle(ligne, disposition):
        return False
    libelle = _texte(ligne, disposition.colonne_libelle)
    return bool(libelle) and _MARQUEUR_TOTAL not in libelle


def est_ligne_total(ligne: Sequence[Any], disposition: DispositionGrandLivre) -> bool:
    return _MARQUEUR_TOTAL in _texte(ligne, disposition.colonne_total)


def est_ligne_ecriture(ligne: Sequence[Any], disposition: DispositionGrandLivre) -> bool:
    return _DATE_ECRITURE.match(_texte(ligne, disposition.colonne_date)) is not None


def lire_transaction(
    ligne: Sequence[Any],
    disposition: DispositionGrandLivre,
    code: str,
    metadonnees: MetadonneesEntete,
) -> Transaction:
    """Convertit une ligne d'ecriture en Transaction selon la disposition."""
    return Transaction(
        Date_GL=metadonnees.date_gl,
        Entite=metadonnees.entite,
        Compte=code,
        Date=normaliser_date(_cellule(ligne, disposition.colonne_date)),
        Code_Journal=_texte(ligne, disposition.colonne_journal),
        Numero_Piece=_texte(ligne, disposition.colonne_piece),
        Libelle_Ecriture=_texte(ligne, disposition.colonne_libelle_ecriture),
        Debit=normaliser_montant(_cellule(ligne, disposition.colonne_debit)),
        Credit=normaliser_montant(_cellule(ligne, disposition.colonne_credit)),
        Solde=normaliser_montant(_cellule(ligne, disposition.colonne_solde)),
    )


def _ouvrir_bloc(ligne: Sequence[Any], disposition: DispositionGrandLivre) -> Bloc:
    return Bloc(
        code=_texte(ligne, 0),
        libelle=_texte(ligne, disposition.colonne_libelle),
        entete={nom: _texte(ligne, idx) for nom, idx in disposition.colonnes_entete},
    )


def _fermer_bloc(bloc: Bloc, blocs: list[Bloc]) -> None:
    if bloc.transactions:
        blocs.append(bloc)
        logger.debug("Bloc %s: %d ecritures", bloc.code, len(bloc.transactions))
    else:
        logger.debug("Bloc %s ignore: aucune ecriture", bloc.code)


def scanner_blocs(
    lignes: Sequence[Sequence[Any] | None],
    disposition: DispositionGrandLivre,
    metadonnees: MetadonneesEntete,
) -> list[Bloc]:
    """Parcourt les lignes et extrait les blocs avec leurs ecritures.

    Deux etats: recherche d'un debut de bloc, puis lecture du corps. Le corps
    se termine sur une ligne "Total" ou sur une ligne portant un nouveau code
    avec la sentinelle vide; dans ce dernier cas la ligne est reexaminee comme
    debut de bloc. Les blocs sans ecriture sont abandonnes.

    Args:
        lignes: Toutes les lignes de la premiere feuille.
        disposition: Position des colonnes pour ce type d'export.
        metadonnees: Entite et date de grand livre reportees sur chaque ecriture.

    Returns:
        Les blocs dans l'ordre de la feuille, chacun avec au moins une ecriture.
    """
    blocs: list[Bloc] = []
    courant: Bloc | None = None

    for ligne in lignes:
        if not ligne:
            continue

        if courant is not None:
            if est_ligne_total(ligne, disposition):
                _fermer_bloc(courant, blocs)
                courant = None
                continue
            if _est_code_sans_sentinelle(ligne, disposition):
                _fermer_bloc(courant, blocs)
                courant = None
                # La ligne est reexaminee ci-dessous comme debut de bloc
            else:
                if est_ligne_ecriture(ligne, disposition):
                    courant.transactions.append(
                        lire_transaction(ligne, disposition, courant.code, metadonnees)
                    )
                continue

        if est_debut_bloc(ligne, disposition):
            courant = _ouvrir_bloc(ligne, disposition)

    if courant is not None:
        _fermer_bloc(courant, blocs)

    logger.info(
        "Grand livre %s: %d blocs, %d ecritures",
        disposition.nom,
        len(blocs),
        sum(len(b.transactions) for b in blocs),
    )
    return blocs
