class FlashcardError(Exception):
    """Base exception for the flashcard core."""
    pass


class InvalidQualityError(FlashcardError, ValueError):
    """Raised when a review quality falls outside the 0-5 scale."""
    def __init__(self, quality: object, message: str = "Quality must be an integer from 0 to 5"):
        self.quality = quality
        self.message = message
        super().__init__(f"{message} (got {quality!r})")


class CardNotFoundError(FlashcardError, LookupError):
    """Raised when a card id is not in the collection."""
    def __init__(self, card_id: str, message: str = "Flashcard not found"):
        self.card_id = card_id
        self.message = message
        super().__init__(f"{message}: {card_id}")


class PackNotFoundError(FlashcardError, LookupError):
    """Raised when a pack id is not in the collection."""
    def __init__(self, pack_id: str, message: str = "Pack not found"):
        self.pack_id = pack_id
        self.message = message
        super().__init__(f"{message}: {pack_id}")


class DuplicateCardError(FlashcardError):
    """Raised when the same source content is added twice."""
    def __init__(self, source_type: str, source_id: str, message: str = "Flashcard already exists"):
        self.source_type = source_type
        self.source_id = source_id
        self.message = message
        super().__init__(f"{message}: {source_type}/{source_id}")


class DefaultPackError(FlashcardError):
    """Raised when an operation would modify a system pack."""
    def __init__(self, pack_id: str, message: str = "System packs cannot be modified"):
        self.pack_id = pack_id
        self.message = message
        super().__init__(f"{message}: {pack_id}")


class SessionStateError(FlashcardError):
    """Raised when a review session is used out of order (e.g. answering a closed session)."""
    pass


class StoreConfigurationError(FlashcardError, ValueError):
    """Raised when a store URL cannot be mapped to a backend."""
    pass
