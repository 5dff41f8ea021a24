"""Adaptateurs vers les systemes externes (API de films)."""
