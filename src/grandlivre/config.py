"""Configuration du moteur GrandLivre (valeurs par defaut, mots-cles)."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from grandlivre.ingestion.classification import MOTS_CLES, TypeFichier


def _mots_cles_par_defaut() -> dict[str, list[str]]:
    return {type_.value: list(mots) for type_, mots in MOTS_CLES.items()}


class DefautsEntete(BaseModel):
    """Valeurs utilisees quand l'en-tete ne permet pas la detection."""

    entite: str = "ENVOL"
    periode: str = Field(default="202412", pattern=r"^\d{6}$")
    date_gl: str = "31/12/2024"


class ConfigGrandLivre(BaseModel):
    """Configuration du parsing et de la classification."""

    defauts: DefautsEntete = Field(default_factory=DefautsEntete)
    mots_cles: dict[str, list[str]] = Field(default_factory=_mots_cles_par_defaut)
    lignes_entete: int = Field(default=10, ge=1, description="Lignes lues pour l'en-tete")
    type_tiers_defaut: str = "Non défini"

    @field_validator("mots_cles")
    @classmethod
    def _categories_connues(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        inconnues = set(v) - {t.value for t in TypeFichier}
        if inconnues:
            raise ValueError(f"Categories inconnues: {sorted(inconnues)}")
        return v


def charger_config(chemin: Path) -> ConfigGrandLivre:
    """Charge la configuration depuis un fichier YAML.

    Args:
        chemin: Chemin du fichier YAML.

    Returns:
        Configuration validee par Pydantic.

    Raises:
        ValueError: Si le YAML est invalide ou ne respecte pas le schema.
        FileNotFoundError: Si le fichier n'existe pas.
    """
    if not chemin.exists():
        raise FileNotFoundError(f"Fichier de configuration introuvable: {chemin}")

    contenu = chemin.read_text(encoding="utf-8")
    try:
        donnees = yaml.safe_load(contenu)
    except yaml.YAMLError as e:
        raise ValueError(f"YAML invalide ({chemin}): {e}") from e

    if donnees is None:
        return ConfigGrandLivre()

    try:
        return ConfigGrandLivre.model_validate(donnees)
    except Exception as e:
        raise ValueError(f"Fichier de configuration invalide ({chemin}): {e}") from e
