"""
CineCache - client de films avec cache local et re-authentification.

Ce package recupere les films depuis une API distante, authentifie les
requetes via un echange de token declenche par les echecs, et conserve les
resultats dans une base locale. Chaque recherche livre d'abord le cache,
puis le resultat reseau une fois disponible.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, erreurs)
- services/ : Couche application (orchestration cache + reseau)
- adapters/ : Couche API (contexte, routes, session, re-authentification)
- infrastructure/ : Stockage local (SQLModel, diskcache)
"""

__version__ = "0.1.0"
