"""
Service de réservation: lien de paiement Square et confirmation post-paiement.
"""
