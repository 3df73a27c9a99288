"""
Module 'emails': rendu et envoi de l'email de confirmation de commande.
"""

from .service import render_receipt_email, send_receipt_email, address_lines

__all__ = ["render_receipt_email", "send_receipt_email", "address_lines"]
