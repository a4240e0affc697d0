"""Tests pour la lecture des classeurs et le chargement de la configuration."""

from __future__ import annotations

import datetime
import re
import zipfile

import pytest
from openpyxl import Workbook

from grandlivre.config import ConfigGrandLivre, charger_config
from grandlivre.erreurs import ClasseurInvalide
from grandlivre.ingestion.classeur import (
    lignes_en_enregistrements,
    lire_enregistrements,
    lire_feuille,
)

# ---------------------------------------------------------------------------
# Tests lire_feuille
# ---------------------------------------------------------------------------


class TestLireFeuille:
    def test_premiere_feuille_rectangulaire(self, tmp_path):
        classeur = Workbook()
        ws = classeur.active
        ws.append(["ENVOL"])
        ws.append(["401000", None, "Fournisseurs"])
        autre = classeur.create_sheet("Autre")
        autre.append(["ignoree"])
        chemin = tmp_path / "gl.xlsx"
        classeur.save(chemin)

        lignes = lire_feuille(chemin)
        assert lignes == [["ENVOL", None, None], ["401000", None, "Fournisseurs"]]

    def test_dates_rendues_en_texte(self, tmp_path):
        classeur = Workbook()
        classeur.active.append(["Période du", datetime.datetime(2024, 12, 31)])
        chemin = tmp_path / "gl.xlsx"
        classeur.save(chemin)
        assert lire_feuille(chemin)[0][1] == "31/12/2024"

    def test_depuis_octets(self, tmp_path):
        classeur = Workbook()
        classeur.active.append(["a", "b"])
        chemin = tmp_path / "gl.xlsx"
        classeur.save(chemin)
        assert lire_feuille(chemin.read_bytes()) == [["a", "b"]]

    def test_octets_invalides(self):
        with pytest.raises(ClasseurInvalide):
            lire_feuille(b"ceci n'est pas un classeur")

    def test_fichier_invalide(self, tmp_path):
        chemin = tmp_path / "faux.xlsx"
        chemin.write_text("texte")
        with pytest.raises(ClasseurInvalide, match="faux.xlsx"):
            lire_feuille(chemin)

    def test_fichier_introuvable(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            lire_feuille(tmp_path / "absent.xlsx")

    def test_dimension_tronquee_ignoree(self, tmp_path):
        """Certains exports declarent une <dimension> plus etroite que la feuille."""
        classeur = Workbook()
        ws = classeur.active
        ws.append(["ENVOL"])
        ws.append(["010125", "AC", "P1"] + [None] * 14 + [-12.5])
        source = tmp_path / "source.xlsx"
        classeur.save(source)

        chemin = tmp_path / "gl.xlsx"
        with zipfile.ZipFile(source) as entree, zipfile.ZipFile(chemin, "w") as sortie:
            for element in entree.infolist():
                contenu = entree.read(element.filename)
                if element.filename == "xl/worksheets/sheet1.xml":
                    contenu = re.sub(rb'<dimension ref="[^"]*"', b'<dimension ref="A1:C2"', contenu)
                sortie.writestr(element, contenu)

        lignes = lire_feuille(chemin)
        assert len(lignes[1]) == 18
        assert lignes[1][17] == -12.5

    def test_repertoire(self, tmp_path):
        with pytest.raises(ClasseurInvalide):
            lire_feuille(tmp_path)

    def test_classeur_invalide_est_value_error(self):
        assert issubclass(ClasseurInvalide, ValueError)


class TestEnregistrements:
    def test_entetes(self):
        lignes = [
            ["Compte tiers", "Type", None],
            ["FACME", "Fournisseur", "x"],
            [None, None, None],
            ["C1", None, None],
        ]
        assert lignes_en_enregistrements(lignes) == [
            {"Compte tiers": "FACME", "Type": "Fournisseur"},
            {"Compte tiers": "C1", "Type": None},
        ]

    def test_vide(self):
        assert lignes_en_enregistrements([]) == []

    def test_lire_enregistrements(self, tmp_path):
        classeur = Workbook()
        ws = classeur.active
        ws.append(["Compte tiers", "Intitulé du tiers"])
        ws.append(["FACME", "ACME"])
        chemin = tmp_path / "plan.xlsx"
        classeur.save(chemin)
        assert lire_enregistrements(chemin) == [
            {"Compte tiers": "FACME", "Intitulé du tiers": "ACME"}
        ]


# ---------------------------------------------------------------------------
# Tests charger_config
# ---------------------------------------------------------------------------


class TestChargerConfig:
    def test_defauts(self):
        config = ConfigGrandLivre()
        assert config.defauts.entite == "ENVOL"
        assert config.defauts.periode == "202412"
        assert config.defauts.date_gl == "31/12/2024"
        assert config.lignes_entete == 10
        assert list(config.mots_cles)[0] == "GRAND_LIVRE_COMPTES"

    def test_fichier_yaml(self, tmp_path):
        chemin = tmp_path / "config.yaml"
        chemin.write_text(
            "defauts:\n  entite: ACME\n  periode: '202306'\ntype_tiers_defaut: Inconnu\n",
            encoding="utf-8",
        )
        config = charger_config(chemin)
        assert config.defauts.entite == "ACME"
        assert config.defauts.periode == "202306"
        assert config.type_tiers_defaut == "Inconnu"

    def test_fichier_vide(self, tmp_path):
        chemin = tmp_path / "config.yaml"
        chemin.write_text("", encoding="utf-8")
        assert charger_config(chemin) == ConfigGrandLivre()

    def test_fichier_absent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            charger_config(tmp_path / "absent.yaml")

    def test_periode_invalide(self, tmp_path):
        chemin = tmp_path / "config.yaml"
        chemin.write_text("defauts:\n  periode: '2024-12'\n", encoding="utf-8")
        with pytest.raises(ValueError, match="invalide"):
            charger_config(chemin)

    def test_categorie_inconnue(self, tmp_path):
        chemin = tmp_path / "config.yaml"
        chemin.write_text("mots_cles:\n  FACTURES: [facture]\n", encoding="utf-8")
        with pytest.raises(ValueError):
            charger_config(chemin)

    def test_yaml_mal_forme(self, tmp_path):
        chemin = tmp_path / "config.yaml"
        chemin.write_text("defauts: [\n", encoding="utf-8")
        with pytest.raises(ValueError, match="YAML"):
            charger_config(chemin)
