"""
API storefront: création de sessions Checkout Stripe, reçus de commande,
webhook de paiement et email de confirmation.
"""

__version__ = "1.0.0"
