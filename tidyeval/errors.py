

class TidyError(Exception):
    """ Base class for all tidyeval errors"""
    pass

class TidySyntaxError(TidyError):
    """ Raised when source text cannot be read as an expression"""

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
        self.position = position

class TidyTypeError(TidyError):
    """ Raised when a value of the wrong type is handed to a builder or builtin"""

class UnboundArgument(TidyError):
    """ Raised when an argument cannot be captured: not supplied, or already forced"""

class UnresolvedSymbol(TidyError):
    """ Raised when a name is not bound in the data mask or the lexical chain"""

class NotCallable(TidyError):
    """ Raised when the callee of a call resolves to something that cannot be invoked"""

class ArityOrBindingError(TidyError):
    """ Raised when supplied arguments cannot be matched to a callee's formals"""

class AmbiguousReference(TidyError):
    """ Raised when a pronoun is used where the current mask/env cannot honour it"""

class EvaluationError(TidyError):
    """ Raised by `stop()` from evaluated code"""
