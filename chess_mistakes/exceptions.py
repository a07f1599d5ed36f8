# chess_mistakes/exceptions.py
"""
Defines custom exceptions for the mistake analyzer.

A clear exception hierarchy, with a common `ChessMistakesError` base, allows
callers to catch everything the library raises in one place while the
orchestration layer reacts to the specific recoverable cases.
"""


class ChessMistakesError(Exception):
    """Base class for all application-specific, catchable errors."""
    pass


class PgnError(ChessMistakesError):
    """Base class for errors related to PGN (Portable Game Notation) handling."""
    pass


class PgnParsingError(PgnError):
    """
    Raised for game-level PGN integrity errors.

    This indicates a problem with the game record itself rather than a file
    I/O or format-level issue.
    """
    pass


class SetupError(PgnParsingError):
    """
    Raised when a game's starting position cannot be built.

    Typically caused by a malformed or illegal `FEN` header. The affected game
    is counted as parsed but contributes nothing to the analysis.
    """
    def __init__(self, message: str, fen: str = ""):
        super().__init__(message)
        self.fen = fen


class PgnServiceError(PgnError):
    """
    Raised for file I/O errors when reading PGN files.

    This typically wraps lower-level exceptions like `FileNotFoundError` or `OSError`.
    """
    pass


class ReportGenerationError(ChessMistakesError):
    """Raised for errors encountered while writing the final reports."""
    pass
