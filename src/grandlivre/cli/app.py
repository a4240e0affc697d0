"""Application CLI principale GrandLivre."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

import grandlivre
from grandlivre.config import ConfigGrandLivre, charger_config
from grandlivre.erreurs import ClasseurInvalide
from grandlivre.export.serialisation import (
    aplatir_comptes,
    aplatir_comptes_enrichis,
    aplatir_tiers,
    ecrire_json,
    ecrire_xlsx,
    exporter_imbrique,
)
from grandlivre.ingestion.classeur import lire_enregistrements, lire_feuille
from grandlivre.ingestion.classification import (
    LIBELLES_TYPES,
    NON_DETECTE,
    TypeFichier,
    valider_lot,
)
from grandlivre.ingestion.grand_livre import parser_grand_livre_comptes, parser_grand_livre_tiers
from grandlivre.ingestion.plan_tiers import charger_plan_tiers
from grandlivre.models.ecritures import MetadonneesEntete, PlanTiers
from grandlivre.pipeline import fusionner_classeurs

app = typer.Typer(
    name="gl",
    help="GrandLivre - Fusion des grands livres comptes et tiers",
    no_args_is_help=True,
)

console = Console()

# Option globale stockee via le callback
_config_path: Path | None = None


def get_config() -> ConfigGrandLivre:
    """Charge la configuration choisie avec --config, ou les valeurs par defaut."""
    if _config_path is None:
        return ConfigGrandLivre()
    try:
        return charger_config(_config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"GrandLivre version {grandlivre.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Chemin vers un fichier de configuration YAML",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Afficher la version de GrandLivre",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """GrandLivre - Parsing et rapprochement des exports grand livre."""
    global _config_path
    _config_path = Path(config) if config else None


def _lire(chemin: str) -> list[list[Any]]:
    try:
        return lire_feuille(Path(chemin))
    except (FileNotFoundError, ClasseurInvalide) as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(1)


def _lire_plan_tiers(chemin: str | None) -> list[PlanTiers]:
    if not chemin:
        return []
    try:
        return charger_plan_tiers(lire_enregistrements(Path(chemin)))
    except (FileNotFoundError, ClasseurInvalide) as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(1)


def _avertir_metadonnees(nom: str, metadonnees: MetadonneesEntete) -> None:
    if metadonnees.inferees_par_defaut:
        console.print(
            f"[yellow]{nom}: en-tete non reconnu, valeurs par defaut utilisees pour "
            f"{', '.join(metadonnees.champs_par_defaut)}[/yellow]"
        )


def _exporter(sortie: str, imbrique: list[dict], aplati: list[dict], feuille: str) -> None:
    chemin = Path(sortie)
    if chemin.suffix.lower() == ".xlsx":
        ecrire_xlsx(aplati, chemin, feuille)
    else:
        ecrire_json(imbrique, chemin)
    console.print(f"Export ecrit: [cyan]{chemin}[/cyan]")


@app.command(name="classer")
def classer(
    fichiers: list[str] = typer.Argument(help="Noms des fichiers du lot"),
) -> None:
    """Detecter le type de chaque fichier et verifier le lot (5 types obligatoires)."""
    noms = [Path(f).name for f in fichiers]
    resultat = valider_lot(noms, get_config().mots_cles)

    tableau = Table(title="Types detectes", show_header=True)
    tableau.add_column("Fichier", style="cyan")
    tableau.add_column("Type", style="green")
    for nom, type_detecte in resultat.types.items():
        libelle = (
            LIBELLES_TYPES[TypeFichier(type_detecte)]
            if type_detecte != NON_DETECTE
            else "[red]Type non detecte[/red]"
        )
        tableau.add_row(nom, libelle)
    console.print(tableau)

    if resultat.est_valide:
        console.print("[green]Lot complet: les 5 fichiers obligatoires sont presents.[/green]")
        return

    for type_manquant in resultat.manquants:
        console.print(f"  [red]Manquant:[/red] {LIBELLES_TYPES[TypeFichier(type_manquant)]}")
    for type_double in resultat.doublons:
        console.print(f"  [red]En double:[/red] {LIBELLES_TYPES[TypeFichier(type_double)]}")
    console.print("[red]Lot invalide.[/red]")
    raise typer.Exit(1)


@app.command(name="comptes")
def comptes(
    fichier: str = typer.Argument(help="Export Excel du grand livre des comptes"),
    sortie: Optional[str] = typer.Option(
        None, "--sortie", "-o", help="Fichier de sortie (.json ou .xlsx)"
    ),
) -> None:
    """Extraire les comptes et ecritures d'un grand livre des comptes."""
    resultat = parser_grand_livre_comptes(_lire(fichier), get_config())
    _avertir_metadonnees("Grand livre des comptes", resultat.metadonnees)

    if not resultat.comptes:
        console.print("[red]Aucun compte detecte.[/red] Verifiez le format du fichier.")
        raise typer.Exit(1)

    nb_ecritures = sum(len(c.Transactions) for c in resultat.comptes)
    console.print(
        f"[green]{len(resultat.comptes)} comptes, {nb_ecritures} ecritures[/green]"
        f" ({resultat.metadonnees.entite}, periode {resultat.metadonnees.periode})"
    )
    if sortie:
        _exporter(
            sortie,
            exporter_imbrique(resultat.comptes),
            aplatir_comptes(resultat.comptes),
            "Grand Livre Comptes",
        )


@app.command(name="tiers")
def tiers(
    fichier: str = typer.Argument(help="Export Excel du grand livre des tiers"),
    plan_tiers: Optional[str] = typer.Option(
        None, "--plan-tiers", "-p", help="Plan tiers Excel (table de reference)"
    ),
    sortie: Optional[str] = typer.Option(
        None, "--sortie", "-o", help="Fichier de sortie (.json ou .xlsx)"
    ),
) -> None:
    """Extraire les tiers et ecritures d'un grand livre des tiers."""
    fiches = _lire_plan_tiers(plan_tiers)
    resultat = parser_grand_livre_tiers(_lire(fichier), fiches, get_config())
    _avertir_metadonnees("Grand livre des tiers", resultat.metadonnees)

    if not resultat.tiers:
        console.print("[red]Aucun tiers detecte.[/red] Verifiez le format du fichier.")
        raise typer.Exit(1)

    nb_ecritures = sum(len(t.Transactions) for t in resultat.tiers)
    console.print(
        f"[green]{len(resultat.tiers)} tiers, {nb_ecritures} ecritures[/green]"
        f" (plan tiers: {len(fiches)} fiches)"
    )
    if sortie:
        _exporter(
            sortie,
            exporter_imbrique(resultat.tiers),
            aplatir_tiers(resultat.tiers),
            "Grand Livre Tiers",
        )


@app.command(name="fusion")
def fusion(
    fichier_comptes: str = typer.Argument(help="Export Excel du grand livre des comptes"),
    fichier_tiers: str = typer.Argument(help="Export Excel du grand livre des tiers"),
    plan_tiers: Optional[str] = typer.Option(
        None, "--plan-tiers", "-p", help="Plan tiers Excel (table de reference)"
    ),
    sortie: Optional[str] = typer.Option(
        None, "--sortie", "-o", help="Fichier de sortie (.json imbrique ou .xlsx aplati)"
    ),
) -> None:
    """Rapprocher le grand livre des comptes et le grand livre des tiers."""
    resultat = fusionner_classeurs(
        _lire(fichier_comptes),
        _lire(fichier_tiers),
        _lire_plan_tiers(plan_tiers),
        get_config(),
    )
    _avertir_metadonnees("Grand livre des comptes", resultat.metadonnees_comptes)
    _avertir_metadonnees("Grand livre des tiers", resultat.metadonnees_tiers)

    if not resultat.comptes:
        console.print("[red]Aucun compte detecte.[/red] Verifiez le format du fichier.")
        raise typer.Exit(1)
    if not resultat.tiers:
        console.print("[red]Aucun tiers detecte.[/red] Verifiez le format du fichier.")
        raise typer.Exit(1)

    stats = resultat.fusion.statistiques
    tableau = Table(title="Resume de la fusion", show_header=True)
    tableau.add_column("Metrique", style="cyan")
    tableau.add_column("Valeur", style="green", justify="right")
    tableau.add_row("Comptes traites", str(stats.comptesTraites))
    tableau.add_row("Ecritures des comptes", str(stats.totalTransactionsComptes))
    tableau.add_row("Avec tiers", str(stats.transactionsAvecTiers))
    tableau.add_row("Sans tiers", str(stats.transactionsSansTiers))
    console.print(tableau)

    if resultat.fusion.cles_dupliquees:
        console.print(
            f"[yellow]{len(resultat.fusion.cles_dupliquees)} cle(s) en double dans le"
            " grand livre des tiers (derniere ecriture retenue).[/yellow]"
        )

    if sortie:
        _exporter(
            sortie,
            exporter_imbrique(resultat.fusion.comptes),
            aplatir_comptes_enrichis(resultat.fusion.comptes),
            "Grand Livre Complet",
        )
