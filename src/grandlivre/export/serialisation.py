"""Export des grands livres: JSON imbrique et table aplatie (une ligne par ecriture).

L'ordre des lignes suit l'ordre des comptes puis celui des ecritures, sans tri.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from pydantic import BaseModel

from grandlivre.ingestion.normalisation import normaliser_montant, texte_cellule
from grandlivre.models.ecritures import (
    CompteEnrichi,
    CompteGrandLivre,
    StatutJointure,
    TiersGrandLivre,
    Transaction,
    TransactionEnrichie,
)

logger = logging.getLogger(__name__)

COLONNES_FUSION: tuple[str, ...] = (
    "Numero_Compte",
    "Libelle_Compte",
    "Periode",
    "Date_GL",
    "Entite",
    "Compte",
    "Compte_tiers",
    "Intitule_du_tiers",
    "Type",
    "Centralisateur",
    "Date",
    "Code_Journal",
    "Numero_Piece",
    "Libelle_Ecriture",
    "Debit",
    "Credit",
    "Solde",
    "Statut_Jointure",
)

_CHAMPS_TIERS = ("Compte_tiers", "Intitule_du_tiers", "Type", "Centralisateur")
_CHAMPS_MONTANTS = ("Debit", "Credit", "Solde")
_CHAMPS_TEXTE = tuple(
    nom for nom in Transaction.model_fields if nom not in _CHAMPS_MONTANTS
)


def exporter_imbrique(blocs: Iterable[BaseModel]) -> list[dict[str, Any]]:
    """Projection imbriquee (comptes contenant leurs ecritures), prete pour JSON."""
    return [bloc.model_dump(mode="json", exclude_none=True) for bloc in blocs]


def aplatir_comptes_enrichis(comptes: Iterable[CompteEnrichi]) -> list[dict[str, Any]]:
    """Une ligne par ecriture, avec les champs du compte parent repetes.

    Les champs tiers absents (ecriture non trouvee) valent "".
    """
    lignes: list[dict[str, Any]] = []
    for compte in comptes:
        parent = {
            "Numero_Compte": compte.Numero_Compte,
            "Libelle_Compte": compte.Libelle_Compte,
            "Periode": compte.Periode,
        }
        for transaction in compte.Transactions:
            valeurs = {**transaction.model_dump(mode="json"), **parent}
            for champ in _CHAMPS_TIERS:
                if valeurs.get(champ) is None:
                    valeurs[champ] = ""
            lignes.append({colonne: valeurs[colonne] for colonne in COLONNES_FUSION})
    return lignes


def regrouper_lignes(lignes: Iterable[Mapping[str, Any]]) -> list[CompteEnrichi]:
    """Reconstruit les comptes enrichis a partir de la table aplatie.

    Les lignes sont regroupees par (Numero_Compte, Libelle_Compte, Periode)
    dans l'ordre de rencontre. Les champs tiers des ecritures non trouvees
    redeviennent None.
    """
    comptes: dict[tuple[str, str, str], CompteEnrichi] = {}
    for ligne in lignes:
        cle = (
            texte_cellule(ligne.get("Numero_Compte")),
            texte_cellule(ligne.get("Libelle_Compte")),
            texte_cellule(ligne.get("Periode")),
        )
        compte = comptes.get(cle)
        if compte is None:
            compte = CompteEnrichi(Numero_Compte=cle[0], Libelle_Compte=cle[1], Periode=cle[2])
            comptes[cle] = compte

        statut = StatutJointure(ligne["Statut_Jointure"])
        # Une ecriture trouvee garde ses champs tiers, meme vides
        tiers = {
            champ: texte_cellule(ligne.get(champ)) if statut is StatutJointure.TROUVE else None
            for champ in _CHAMPS_TIERS
        }
        compte.Transactions.append(
            TransactionEnrichie(
                **_transaction_depuis_ligne(ligne),
                **tiers,
                Statut_Jointure=statut,
            )
        )
    return list(comptes.values())


def _transaction_depuis_ligne(ligne: Mapping[str, Any], compte: str | None = None) -> dict:
    valeurs: dict[str, Any] = {champ: texte_cellule(ligne.get(champ)) for champ in _CHAMPS_TEXTE}
    valeurs.update({champ: normaliser_montant(ligne.get(champ)) for champ in _CHAMPS_MONTANTS})
    if compte is not None:
        valeurs["Compte"] = compte
    return valeurs


def aplatir_comptes(comptes: Iterable[CompteGrandLivre]) -> list[dict[str, Any]]:
    """Table complete du grand livre des comptes (compte + ecriture par ligne)."""
    return [
        {
            "Numero_Compte": compte.Numero_Compte,
            "Libelle_Compte": compte.Libelle_Compte,
            "Periode": compte.Periode,
            **transaction.model_dump(mode="json"),
        }
        for compte in comptes
        for transaction in compte.Transactions
    ]


def aplatir_tiers(tiers: Iterable[TiersGrandLivre]) -> list[dict[str, Any]]:
    """Table complete du grand livre des tiers (tiers + ecriture par ligne)."""
    return [
        {
            **liste_tiers([bloc])[0],
            **transaction.model_dump(mode="json"),
        }
        for bloc in tiers
        for transaction in bloc.Transactions
    ]


def liste_comptes(comptes: Iterable[CompteGrandLivre]) -> list[dict[str, Any]]:
    """Liste des comptes sans leurs ecritures."""
    return [c.model_dump(mode="json", exclude={"Transactions"}) for c in comptes]


def liste_tiers(tiers: Iterable[TiersGrandLivre]) -> list[dict[str, Any]]:
    """Liste des tiers sans leurs ecritures."""
    return [t.model_dump(mode="json", exclude={"Transactions"}) for t in tiers]


def regrouper_comptes(enregistrements: Iterable[Mapping[str, Any]]) -> list[CompteGrandLivre]:
    """Reconstruit les comptes a partir d'un export aplati du grand livre des comptes.

    Les lignes sont regroupees par Numero_Compte; le libelle et la periode sont
    ceux de la premiere ligne du compte.
    """
    comptes: dict[str, CompteGrandLivre] = {}
    for ligne in enregistrements:
        numero = texte_cellule(ligne.get("Numero_Compte"))
        if numero not in comptes:
            comptes[numero] = CompteGrandLivre(
                Numero_Compte=numero,
                Libelle_Compte=texte_cellule(ligne.get("Libelle_Compte")),
                Periode=texte_cellule(ligne.get("Periode")),
            )
        comptes[numero].Transactions.append(Transaction(**_transaction_depuis_ligne(ligne)))
    return list(comptes.values())


def regrouper_tiers(enregistrements: Iterable[Mapping[str, Any]]) -> list[TiersGrandLivre]:
    """Reconstruit les tiers a partir d'un export aplati du grand livre des tiers.

    Chaque ecriture prend le compte centralisateur comme Compte, afin d'etre
    rapprochable du grand livre des comptes.
    """
    tiers: dict[str, TiersGrandLivre] = {}
    for ligne in enregistrements:
        code = texte_cellule(ligne.get("Compte_tiers"))
        if code not in tiers:
            tiers[code] = TiersGrandLivre(
                Compte_tiers=code,
                Type=texte_cellule(ligne.get("Type")),
                Intitule_du_tiers=texte_cellule(ligne.get("Intitule_du_tiers")),
                Centralisateur=texte_cellule(ligne.get("Centralisateur")),
                Periode=texte_cellule(ligne.get("Periode")),
            )
        centralisateur = texte_cellule(ligne.get("Centralisateur"))
        tiers[code].Transactions.append(
            Transaction(**_transaction_depuis_ligne(ligne, compte=centralisateur))
        )
    return list(tiers.values())


def ecrire_json(donnees: Any, chemin: Path) -> Path:
    """Ecrit des donnees en JSON UTF-8 indente."""
    chemin.parent.mkdir(parents=True, exist_ok=True)
    chemin.write_text(json.dumps(donnees, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Export JSON: %s", chemin)
    return chemin


def ecrire_xlsx(
    lignes: Sequence[Mapping[str, Any]],
    chemin: Path,
    feuille: str = "Grand Livre",
) -> Path:
    """Ecrit une table (liste de dictionnaires) dans un classeur xlsx.

    L'en-tete est forme des cles de la premiere ligne.
    """
    chemin.parent.mkdir(parents=True, exist_ok=True)
    classeur = Workbook()
    ws = classeur.active
    ws.title = feuille[:31]
    if lignes:
        colonnes = list(lignes[0].keys())
        ws.append(colonnes)
        for ligne in lignes:
            ws.append([ligne.get(colonne) for colonne in colonnes])
    classeur.save(chemin)
    logger.info("Export Excel: %s (%d lignes)", chemin, len(lignes))
    return chemin
