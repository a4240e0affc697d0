"""Exceptions du moteur GrandLivre."""

from __future__ import annotations


class ClasseurInvalide(ValueError):
    """Le classeur ne peut pas etre lu comme un tableau lignes/colonnes."""
