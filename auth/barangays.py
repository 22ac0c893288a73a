"""Barangays a citizen account can belong to."""

from __future__ import annotations

BARANGAYS: tuple[str, ...] = (
    "agnas", "bacolod", "bangkilingan", "bantayan", "baranghawon", "basagan",
    "basud", "bognabong", "bombon", "bonot", "san isidro", "buang", "buhian",
    "cabagnan", "cobo", "comon", "cormidal", "divino rostro", "fatima",
    "guinobat", "hacienda", "magapo", "mariroc", "matagbac", "oras", "oson",
    "panal", "pawa", "pinagbobong", "quinale cabasan", "quinastillojan", "rawis",
    "sagurong", "salvacion", "san antonio", "san carlos", "san juan", "san lorenzo",
    "san ramon", "san roque", "san vicente", "santo cristo", "sua-igot", "tabiguian",
    "tagas", "tayhi", "visita",
)

_BARANGAY_SET = frozenset(BARANGAYS)


def normalize_barangay(value: str) -> str:
    return value.strip().lower()


def is_valid_barangay(value: str) -> bool:
    return normalize_barangay(value) in _BARANGAY_SET
