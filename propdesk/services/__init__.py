from .results import OperationResult
