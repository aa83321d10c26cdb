class StudyDeckError(Exception):
    pass


class InvalidQualityInput(StudyDeckError, ValueError):
    """Raised when a review quality is not a finite number"""
    pass


class CardNotFoundError(StudyDeckError, LookupError):
    pass


class DeckNotFoundError(StudyDeckError, LookupError):
    pass


class DeckLimitExceeded(StudyDeckError):
    pass


class DeckImportError(StudyDeckError, ValueError):
    pass


class ContentGenerationError(StudyDeckError):
    pass
