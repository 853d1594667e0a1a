from __future__ import annotations


class DynoTableError(Exception):
    pass


class ConfigurationError(DynoTableError):
    pass


class IndexNotFoundError(ConfigurationError):
    def __init__(self, *, index_name: str) -> None:
        super().__init__(f"index {index_name} does not exist")
        self.index_name = index_name


class ValidationError(DynoTableError):
    pass


class ExpressionError(DynoTableError):
    pass


class InvalidOperatorError(ExpressionError):
    def __init__(self, *, operator: object) -> None:
        super().__init__(f"unsupported operator: {operator}")
        self.operator = operator


class BuilderAlreadyExecutedError(DynoTableError):
    def __init__(self, *, builder: str) -> None:
        super().__init__(f"{builder} has already been executed")
        self.builder = builder


class StoreError(DynoTableError):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class ConditionalCheckFailedError(StoreError):
    pass


class ResourceNotFoundError(StoreError):
    pass


class ThrottlingError(StoreError):
    pass


class StoreValidationError(StoreError):
    pass


class TransactionCanceledError(StoreError):
    def __init__(self, *, message: str, reason_codes: tuple[str, ...]) -> None:
        super().__init__(code="TransactionCanceledException", message=message)
        self.reason_codes = reason_codes
