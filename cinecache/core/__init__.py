"""
Couche domaine (core).

Contient les entités métier, les ports (interfaces abstraites) et la
taxonomie d'erreurs. Cette couche n'a AUCUNE dépendance vers l'infrastructure
(httpx, SQLModel, diskcache).

Sous-packages :
- entities/ : Entités métier (Movie, Actor)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- errors : Exceptions partagées par le chemin réseau et le cache
"""
