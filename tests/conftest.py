"""Fixtures partagees: feuilles d'export grand livre construites en memoire."""

from __future__ import annotations

import pytest

LARGEUR_COMPTES = 18
LARGEUR_TIERS = 15


def ligne(largeur: int, cellules: dict[int, object]) -> list:
    """Construit une ligne de `largeur` cellules, None hors des index donnes."""
    valeurs: list = [None] * largeur
    for index, valeur in cellules.items():
        valeurs[index] = valeur
    return valeurs


def ecriture_compte(date, journal, piece, libelle, debit="", credit="", solde=""):
    return ligne(
        LARGEUR_COMPTES,
        {0: date, 1: journal, 2: piece, 5: libelle, 11: debit, 14: credit, 17: solde},
    )


def ecriture_tiers(date, journal, piece, libelle, debit="", credit="", solde=""):
    return ligne(
        LARGEUR_TIERS,
        {0: date, 1: journal, 2: piece, 4: libelle, 9: debit, 11: credit, 14: solde},
    )


def entete_export(largeur: int) -> list[list]:
    return [
        ligne(largeur, {0: "SOCIETE ENVOL SA"}),
        ligne(largeur, {0: "Date de tirage 05/02/2025"}),
        ligne(largeur, {1: "Période du", 2: "01/01/24"}),
        ligne(largeur, {1: "au", 2: "31/01/24"}),
        ligne(largeur, {0: "© Sage"}),
    ]


@pytest.fixture
def feuille_comptes() -> list[list]:
    """Grand livre des comptes: 401000 (2 ecritures), 411000 (1), 512000 (vide)."""
    L = LARGEUR_COMPTES
    return [
        *entete_export(L),
        ligne(L, {0: "N° compte", 1: "Jnl", 2: "Libellé"}),
        ligne(L, {0: "401000", 2: "Fournisseurs"}),
        ecriture_compte("150124", "AC", "PC001", "Paiement fournisseur", "", "1 234,56", "-1 234,56"),
        ecriture_compte("200124", "BQ", "PC002", "Reglement ACME", "1 234,56", "", "0,00"),
        ligne(L, {2: "Total compte 401000", 11: "1 234,56", 14: "1 234,56"}),
        ligne(L, {0: "411000", 2: "Clients"}),
        ecriture_compte("310124", "VT", "FA001", "Facture client", "500,00", "", "500,00"),
        ligne(L, {2: "Total compte 411000"}),
        ligne(L, {0: "512000", 2: "Banque"}),
        ligne(L, {2: "Total compte 512000"}),
    ]


@pytest.fixture
def feuille_tiers() -> list[list]:
    """Grand livre des tiers: FACME (centralise sur 401000) et CDUPONT (411000)."""
    L = LARGEUR_TIERS
    return [
        *entete_export(L),
        ligne(L, {0: "FACME", 2: "ACME SARL", 3: "401000"}),
        ecriture_tiers("150124", "AC", "PC001", "Paiement fournisseur", "", "1 234,56", "-1 234,56"),
        ligne(L, {3: "Total tiers FACME"}),
        ligne(L, {0: "CDUPONT", 2: "Dupont Jean", 3: "411000"}),
        ecriture_tiers("310124", "VT", "FA001", "Facture client", "500,00", "", "500,00"),
        ligne(L, {3: "Total tiers CDUPONT"}),
    ]
