"""
Taxonomie d'erreurs de l'API storefront.
Chaque erreur porte son code HTTP; la conversion en réponse est faite par
app_setup.exceptions.register_exception_handlers.
"""


class StorefrontError(Exception):
    status_code = 500
    # Réponse texte brut au lieu de {"error": ...}
    plain_text = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Entrée manquante ou mal formée (400)."""
    status_code = 400


class UnknownProductError(StorefrontError):
    """Le panier référence un id absent du catalogue (500, journalisé)."""
    status_code = 500

    def __init__(self, product_id: str):
        super().__init__(f"Unknown product id: {product_id}")
        self.product_id = product_id


class SignatureError(StorefrontError):
    """Signature webhook invalide: on refuse sans rien traiter (400)."""
    status_code = 400
    plain_text = True


class UpstreamError(StorefrontError):
    """Échec côté Stripe ou fournisseur d'email (500)."""
    status_code = 500
