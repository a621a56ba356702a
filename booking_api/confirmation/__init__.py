"""
Module 'confirmation': vérification post-paiement et envoi unique des notifications.
"""
