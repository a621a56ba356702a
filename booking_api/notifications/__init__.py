"""
Module 'notifications': backends d'envoi, gabarits et dispatcher post-paiement.
"""
