class ProblemError(ValueError):
    """Raised when a rod cutting problem violates the input contract."""


class InvalidLength(ProblemError):
    pass


class PriceCountMismatch(ProblemError):
    pass


class InvalidPrice(ProblemError):
    def __init__(self, piece_length: int, value: object, reason: str) -> None:
        self.piece_length = piece_length
        self.value = value
        super().__init__(f"Invalid price for length {piece_length} ({value!r}): {reason}")
