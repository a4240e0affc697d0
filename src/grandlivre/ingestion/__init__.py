"""Lecture et parsing des exports de grand livre."""
