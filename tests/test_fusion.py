"""Tests pour le moteur de fusion des grands livres."""

from __future__ import annotations

import pytest

from grandlivre.fusion.moteur import (
    cle_composite,
    construire_index_tiers,
    fusionner_grands_livres,
    recaler_sur_centralisateur,
)
from grandlivre.ingestion.grand_livre import parser_grand_livre_comptes, parser_grand_livre_tiers
from grandlivre.models.ecritures import (
    CompteGrandLivre,
    StatutJointure,
    TiersGrandLivre,
    Transaction,
)
from grandlivre.pipeline import fusionner_classeurs


def _txn(compte="512", date="2024-01-01", journal="AC", piece="PC001",
         libelle="Paiement fournisseur", debit=0.0, credit=100.0) -> Transaction:
    return Transaction(
        Date_GL="31/12/2024",
        Entite="ENVOL",
        Compte=compte,
        Date=date,
        Code_Journal=journal,
        Numero_Piece=piece,
        Libelle_Ecriture=libelle,
        Debit=debit,
        Credit=credit,
        Solde=debit - credit,
    )


def _compte(numero="512", transactions=None) -> CompteGrandLivre:
    return CompteGrandLivre(
        Numero_Compte=numero,
        Libelle_Compte="Banque",
        Periode="202412",
        Transactions=transactions or [],
    )


def _tiers(code="FACME", transactions=None, centralisateur="401000") -> TiersGrandLivre:
    return TiersGrandLivre(
        Compte_tiers=code,
        Type="Fournisseur",
        Intitule_du_tiers=f"Tiers {code}",
        Centralisateur=centralisateur,
        Periode="202412",
        Transactions=transactions or [],
    )


# ---------------------------------------------------------------------------
# Tests cle composite et index
# ---------------------------------------------------------------------------


class TestCleComposite:
    def test_format(self):
        assert cle_composite(_txn()) == "512|2024-01-01|AC|PC001|Paiement fournisseur"

    def test_sensible_casse(self):
        assert cle_composite(_txn(libelle="paiement fournisseur")) != cle_composite(_txn())

    def test_index_derniere_ecriture_gagne(self):
        index, doublons = construire_index_tiers(
            [_tiers("T1", [_txn(credit=1.0)]), _tiers("T2", [_txn(credit=2.0)])]
        )
        cle = cle_composite(_txn())
        assert index[cle].Compte_tiers == "T2"
        assert index[cle].transaction.Credit == 2.0
        assert doublons == [cle]


# ---------------------------------------------------------------------------
# Tests fusionner_grands_livres
# ---------------------------------------------------------------------------


class TestFusion:
    def test_ecriture_trouvee(self):
        resultat = fusionner_grands_livres([_compte(transactions=[_txn()])], [_tiers(transactions=[_txn()])])
        txn = resultat.comptes[0].Transactions[0]
        assert txn.Statut_Jointure == StatutJointure.TROUVE
        assert txn.Compte_tiers == "FACME"
        assert txn.Intitule_du_tiers == "Tiers FACME"
        assert txn.Centralisateur == "401000"
        assert txn.Type == "Fournisseur"

    def test_ecriture_non_trouvee(self):
        resultat = fusionner_grands_livres(
            [_compte(transactions=[_txn(piece="PC999")])], [_tiers(transactions=[_txn()])]
        )
        txn = resultat.comptes[0].Transactions[0]
        assert txn.Statut_Jointure == StatutJointure.NON_TROUVE
        assert txn.Compte_tiers is None
        assert txn.Intitule_du_tiers is None
        assert txn.Centralisateur is None
        assert txn.Type is None
        assert "Compte_tiers" not in txn.model_dump(exclude_none=True)

    def test_statistiques(self):
        comptes = [
            _compte("512", [_txn(), _txn(piece="X1"), _txn(piece="X2")]),
            _compte("601", []),
        ]
        resultat = fusionner_grands_livres(comptes, [_tiers(transactions=[_txn()])])
        stats = resultat.statistiques
        assert stats.totalTransactionsComptes == 3
        assert stats.transactionsAvecTiers == 1
        assert stats.transactionsSansTiers == 2
        assert stats.comptesTraites == 2
        assert stats.transactionsAvecTiers + stats.transactionsSansTiers == stats.totalTransactionsComptes

    def test_entrees_vides(self):
        resultat = fusionner_grands_livres([], [])
        assert resultat.comptes == []
        assert resultat.statistiques.totalTransactionsComptes == 0
        assert resultat.statistiques.comptesTraites == 0

    def test_idempotence(self):
        comptes = [_compte(transactions=[_txn(), _txn(piece="Z")])]
        tiers = [_tiers(transactions=[_txn()])]
        premier = fusionner_grands_livres(comptes, tiers)
        second = fusionner_grands_livres(comptes, tiers)
        assert premier.model_dump_json() == second.model_dump_json()

    def test_entrees_non_modifiees(self):
        comptes = [_compte(transactions=[_txn()])]
        avant = comptes[0].model_dump()
        fusionner_grands_livres(comptes, [_tiers(transactions=[_txn()])])
        assert comptes[0].model_dump() == avant

    def test_ordre_conserve(self):
        comptes = [_compte("B", [_txn(piece="2"), _txn(piece="1")]), _compte("A", [_txn(piece="3")])]
        resultat = fusionner_grands_livres(comptes, [])
        assert [c.Numero_Compte for c in resultat.comptes] == ["B", "A"]
        assert [t.Numero_Piece for t in resultat.comptes[0].Transactions] == ["2", "1"]

    def test_jointure_coherente(self):
        tiers = [_tiers(transactions=[_txn(), _txn(piece="PC002", date="2024-01-02")])]
        comptes = [_compte(transactions=[_txn(), _txn(piece="PC002"), _txn(piece="PC002", date="2024-01-02")])]
        resultat = fusionner_grands_livres(comptes, tiers)
        cles_tiers = {cle_composite(t) for b in tiers for t in b.Transactions}
        for txn in resultat.comptes[0].Transactions:
            trouve = cle_composite(txn) in cles_tiers
            assert (txn.Statut_Jointure == StatutJointure.TROUVE) == trouve
            assert (txn.Compte_tiers is not None) == trouve

    def test_doublons_signales(self):
        tiers = [_tiers("T1", [_txn()]), _tiers("T2", [_txn()])]
        resultat = fusionner_grands_livres([_compte(transactions=[_txn()])], tiers)
        assert resultat.cles_dupliquees == [cle_composite(_txn())]
        assert resultat.comptes[0].Transactions[0].Compte_tiers == "T2"


# ---------------------------------------------------------------------------
# Tests recaler_sur_centralisateur et traitement complet
# ---------------------------------------------------------------------------


class TestRecalage:
    def test_compte_remplace(self):
        recales = recaler_sur_centralisateur([_tiers(transactions=[_txn(compte="FACME")])])
        assert recales[0].Transactions[0].Compte == "401000"

    def test_sans_centralisateur(self):
        recales = recaler_sur_centralisateur(
            [_tiers(transactions=[_txn(compte="FACME")], centralisateur="")]
        )
        assert recales[0].Transactions[0].Compte == "FACME"

    def test_entree_non_modifiee(self):
        tiers = [_tiers(transactions=[_txn(compte="FACME")])]
        recaler_sur_centralisateur(tiers)
        assert tiers[0].Transactions[0].Compte == "FACME"


class TestTraitementComplet:
    def test_fusion_classeurs(self, feuille_comptes, feuille_tiers):
        resultat = fusionner_classeurs(feuille_comptes, feuille_tiers)
        stats = resultat.fusion.statistiques
        assert stats.comptesTraites == 2
        assert stats.totalTransactionsComptes == 3
        assert stats.transactionsAvecTiers == 2
        assert stats.transactionsSansTiers == 1
        assert not resultat.vide
        assert not resultat.metadonnees_par_defaut

        fournisseurs = resultat.fusion.comptes[0].Transactions
        assert fournisseurs[0].Compte_tiers == "FACME"
        assert fournisseurs[0].Statut_Jointure == StatutJointure.TROUVE
        assert fournisseurs[1].Statut_Jointure == StatutJointure.NON_TROUVE

    def test_sans_recalage_aucune_correspondance(self, feuille_comptes, feuille_tiers):
        comptes = parser_grand_livre_comptes(feuille_comptes).comptes
        tiers = parser_grand_livre_tiers(feuille_tiers).tiers
        resultat = fusionner_grands_livres(comptes, tiers)
        assert resultat.statistiques.transactionsAvecTiers == 0

    def test_tiers_vide(self, feuille_comptes):
        resultat = fusionner_classeurs(feuille_comptes, [])
        assert resultat.vide
        assert resultat.fusion.statistiques.transactionsSansTiers == 3
        assert resultat.metadonnees_par_defaut

    @pytest.mark.parametrize("repetitions", [1, 3])
    def test_sans_etat_entre_appels(self, feuille_comptes, feuille_tiers, repetitions):
        attendu = fusionner_classeurs(feuille_comptes, feuille_tiers).fusion.model_dump()
        for _ in range(repetitions):
            assert fusionner_classeurs(feuille_comptes, feuille_tiers).fusion.model_dump() == attendu
