"""
Client offline-first du questionnaire d'humeur.

Écrit d'abord sur l'API distante, bascule en silence sur le stockage local
quand le serveur est injoignable, puis réconcilie le stockage local avec le
serveur lors d'une synchronisation.
"""
