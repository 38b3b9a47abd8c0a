class AIServiceError(Exception):
    """Raised when the generative-AI service fails or returns an unusable reply."""


class DocumentExtractionError(Exception):
    """Raised when a stored contract cannot be downloaded or turned into text."""


class PaymentGatewayError(Exception):
    """Raised when the payment gateway rejects a request or is not configured."""


class EmailDeliveryError(Exception):
    """Raised when the transactional email API rejects a message."""


class ContractNotReadyError(Exception):
    """Raised when chat is attempted on a contract that has not been analyzed."""
