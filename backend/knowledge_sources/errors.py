class KnowledgeSourceError(Exception):
    """Raised when a knowledge source cannot be fetched or parsed as a whole."""

    pass
