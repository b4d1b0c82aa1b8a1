# address_verification/services/errors.py
# Domain errors raised by the service layer. They are HTTPExceptions so the
# routes can let them propagate unchanged.
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Kayıt bulunamadı"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AlreadyProcessedError(HTTPException):
    def __init__(self, detail: str = "Bu değişiklik zaten işlenmiş"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class HasChildrenError(HTTPException):
    def __init__(self, child_count: int):
        self.child_count = child_count
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Bu kaydın {child_count} alt kaydı var. Önce onları silmelisiniz.",
        )


class InvalidError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
