class CartError(Exception):
    """Base error for cart composition and pricing."""


class FlavorSelectionError(CartError):
    """A flavor step or a client-sent selection breaks the product's flavor rule."""


class IncompleteSelectionError(FlavorSelectionError):
    """Selection does not cover all pieces or has too few distinct flavors."""


class CartLineNotFoundError(CartError):
    def __init__(self, line_id: str):
        super().__init__(f"Cart line {line_id} not found")
        self.line_id = line_id
