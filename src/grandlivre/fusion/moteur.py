"""Moteur de fusion: rapproche chaque ecriture des comptes de son ecriture tiers.

La cle de rapprochement est la concatenation exacte
Compte|Date|Code_Journal|Numero_Piece|Libelle_Ecriture, sensible a la casse et
sans normalisation. La fonction de fusion est pure: les entrees ne sont pas
modifiees et deux appels identiques donnent le meme resultat.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from grandlivre.models.ecritures import (
    CompteEnrichi,
    CompteGrandLivre,
    ResultatFusion,
    StatistiquesFusion,
    StatutJointure,
    TiersGrandLivre,
    Transaction,
    TransactionEnrichie,
)

logger = logging.getLogger(__name__)

SEPARATEUR_CLE = "|"


@dataclass(frozen=True)
class EntreeIndexTiers:
    """Infos tiers associees a une cle composite."""

    Compte_tiers: str
    Intitule_du_tiers: str
    Centralisateur: str
    Type: str
    transaction: Transaction


def cle_composite(transaction: Transaction) -> str:
    """Cle de rapprochement d'une ecriture."""
    return SEPARATEUR_CLE.join(
        (
            transaction.Compte,
            transaction.Date,
            transaction.Code_Journal,
            transaction.Numero_Piece,
            transaction.Libelle_Ecriture,
        )
    )


def construire_index_tiers(
    tiers: Iterable[TiersGrandLivre],
) -> tuple[dict[str, EntreeIndexTiers], list[str]]:
    """Indexe toutes les ecritures tiers par cle composite.

    En cas de cle en double, la derniere ecriture rencontree remplace la
    precedente.

    Returns:
        Tuple (index, cles en double dans l'ordre de rencontre).
    """
    index: dict[str, EntreeIndexTiers] = {}
    doublons: list[str] = []
    for bloc in tiers:
        for transaction in bloc.Transactions:
            cle = cle_composite(transaction)
            if cle in index:
                doublons.append(cle)
            index[cle] = EntreeIndexTiers(
                Compte_tiers=bloc.Compte_tiers,
                Intitule_du_tiers=bloc.Intitule_du_tiers,
                Centralisateur=bloc.Centralisateur,
                Type=bloc.Type,
                transaction=transaction,
            )
    return index, doublons


def _enrichir(transaction: Transaction, entree: EntreeIndexTiers | None) -> TransactionEnrichie:
    donnees = transaction.model_dump()
    if entree is None:
        return TransactionEnrichie(**donnees, Statut_Jointure=StatutJointure.NON_TROUVE)
    return TransactionEnrichie(
        **donnees,
        Compte_tiers=entree.Compte_tiers,
        Intitule_du_tiers=entree.Intitule_du_tiers,
        Centralisateur=entree.Centralisateur,
        Type=entree.Type,
        Statut_Jointure=StatutJointure.TROUVE,
    )


def fusionner_grands_livres(
    comptes: Sequence[CompteGrandLivre],
    tiers: Sequence[TiersGrandLivre],
) -> ResultatFusion:
    """Enrichit les ecritures des comptes avec les infos du grand livre tiers.

    Args:
        comptes: Comptes issus du grand livre des comptes.
        tiers: Tiers issus du grand livre des tiers (deja completes par le
            plan tiers).

    Returns:
        Les comptes enrichis dans l'ordre d'entree, les statistiques et les
        cles composites en double dans l'index tiers.
    """
    index, doublons = construire_index_tiers(tiers)
    if doublons:
        logger.warning(
            "%d cle(s) en double dans le grand livre tiers, derniere ecriture retenue",
            len(doublons),
        )

    stats = StatistiquesFusion(comptesTraites=len(comptes))
    comptes_enrichis: list[CompteEnrichi] = []

    for compte in comptes:
        transactions: list[TransactionEnrichie] = []
        for transaction in compte.Transactions:
            entree = index.get(cle_composite(transaction))
            stats.totalTransactionsComptes += 1
            if entree is None:
                stats.transactionsSansTiers += 1
            else:
                stats.transactionsAvecTiers += 1
            transactions.append(_enrichir(transaction, entree))

        comptes_enrichis.append(
            CompteEnrichi(
                Numero_Compte=compte.Numero_Compte,
                Libelle_Compte=compte.Libelle_Compte,
                Periode=compte.Periode,
                Transactions=transactions,
            )
        )

    logger.info(
        "Fusion: %d comptes, %d ecritures, %d avec tiers, %d sans tiers",
        stats.comptesTraites,
        stats.totalTransactionsComptes,
        stats.transactionsAvecTiers,
        stats.transactionsSansTiers,
    )
    return ResultatFusion(
        comptes=comptes_enrichis,
        statistiques=stats,
        cles_dupliquees=doublons,
    )


def recaler_sur_centralisateur(tiers: Iterable[TiersGrandLivre]) -> list[TiersGrandLivre]:
    """Remplace le Compte des ecritures tiers par le compte centralisateur.

    Le grand livre des tiers porte le code tiers dans Compte; pour le
    rapprocher du grand livre des comptes, les ecritures doivent porter le
    compte general collectif. Un tiers sans centralisateur est laisse tel quel.
    """
    recales: list[TiersGrandLivre] = []
    for bloc in tiers:
        if not bloc.Centralisateur:
            recales.append(bloc.model_copy(deep=True))
            continue
        recales.append(
            bloc.model_copy(
                update={
                    "Transactions": [
                        t.model_copy(update={"Compte": bloc.Centralisateur})
                        for t in bloc.Transactions
                    ]
                }
            )
        )
    return recales
