"""Modeles des ecritures de grand livre (comptes, tiers, fusion)."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class StatutJointure(str, Enum):
    """Resultat de la recherche d'une ecriture dans l'index des tiers."""

    TROUVE = "Trouvé"
    NON_TROUVE = "Non trouvé"


class Transaction(BaseModel):
    """Une ligne de grand livre.

    Debit et Credit sont des montants independants: le sens est donne par la
    colonne, pas par le signe.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "Date_GL": "31/12/2024",
                    "Entite": "ENVOL",
                    "Compte": "401000",
                    "Date": "2024-01-15",
                    "Code_Journal": "AC",
                    "Numero_Piece": "PC001",
                    "Libelle_Ecriture": "Paiement fournisseur",
                    "Debit": 0.0,
                    "Credit": 1234.56,
                    "Solde": -1234.56,
                }
            ]
        },
    )

    Date_GL: str
    Entite: str
    Compte: str = Field(description="Numero du compte ou code tiers du bloc")
    Date: str = Field(description="Date ISO YYYY-MM-DD")
    Code_Journal: str
    Numero_Piece: str
    Libelle_Ecriture: str
    Debit: float = 0.0
    Credit: float = 0.0
    Solde: float = 0.0


class CompteGrandLivre(BaseModel):
    """Bloc d'un compte general et ses ecritures."""

    Numero_Compte: str
    Libelle_Compte: str
    Periode: str
    Transactions: list[Transaction] = Field(default_factory=list)


class TiersGrandLivre(BaseModel):
    """Bloc d'un compte tiers (client, fournisseur...) et ses ecritures."""

    Compte_tiers: str
    Type: str
    Intitule_du_tiers: str
    Centralisateur: str
    Periode: str
    Transactions: list[Transaction] = Field(default_factory=list)


class PlanTiers(BaseModel):
    """Fiche de reference d'un tiers, indexee par Compte_tiers."""

    Compte_tiers: str
    Type: str = ""
    Intitule_du_tiers: str = ""
    Centralisateur: str = ""
    Periode: str = ""


class TransactionEnrichie(Transaction):
    """Ecriture du grand livre des comptes completee par les infos tiers."""

    Compte_tiers: str | None = None
    Intitule_du_tiers: str | None = None
    Centralisateur: str | None = None
    Type: str | None = None
    Statut_Jointure: StatutJointure


class CompteEnrichi(BaseModel):
    """Compte general dont les ecritures ont ete rapprochees des tiers."""

    Numero_Compte: str
    Libelle_Compte: str
    Periode: str
    Transactions: list[TransactionEnrichie] = Field(default_factory=list)


class StatistiquesFusion(BaseModel):
    """Compteurs de la fusion.

    totalTransactionsComptes == transactionsAvecTiers + transactionsSansTiers.
    """

    totalTransactionsComptes: int = Field(default=0, ge=0)
    transactionsAvecTiers: int = Field(default=0, ge=0)
    transactionsSansTiers: int = Field(default=0, ge=0)
    comptesTraites: int = Field(default=0, ge=0)


class MetadonneesEntete(BaseModel):
    """Entite et periode lues dans l'en-tete d'un export."""

    entite: str
    periode: str = Field(description="Code periode YYYYMM")
    date_gl: str = Field(description="Date de fin de periode DD/MM/YYYY")
    champs_par_defaut: list[str] = Field(
        default_factory=list,
        description="Champs remplis par les valeurs par defaut (detection echouee)",
    )

    @computed_field
    @property
    def inferees_par_defaut(self) -> bool:
        """Vrai si au moins un champ provient des valeurs par defaut."""
        return bool(self.champs_par_defaut)


class ResultatGrandLivreComptes(BaseModel):
    """Resultat du parsing d'un grand livre des comptes."""

    metadonnees: MetadonneesEntete
    comptes: list[CompteGrandLivre] = Field(default_factory=list)


class ResultatGrandLivreTiers(BaseModel):
    """Resultat du parsing d'un grand livre des tiers."""

    metadonnees: MetadonneesEntete
    tiers: list[TiersGrandLivre] = Field(default_factory=list)


class ResultatFusion(BaseModel):
    """Comptes enrichis, statistiques et cles en doublon dans l'index tiers."""

    comptes: list[CompteEnrichi] = Field(default_factory=list)
    statistiques: StatistiquesFusion = Field(default_factory=StatistiquesFusion)
    cles_dupliquees: list[str] = Field(default_factory=list)
