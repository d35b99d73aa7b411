from typing import Optional


class LabRiskError(Exception):
    """Base class for every error the app reports to the user."""


class InputValidationError(LabRiskError):
    pass


class PreconditionError(LabRiskError):
    pass


class UpstreamServiceError(LabRiskError):
    def __init__(self, service: str, message: str, status: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.service = service
        self.message = message
        self.status = status
        self.detail = detail

    def __str__(self) -> str:
        parts = [f"{self.service}: {self.message}"]
        if self.status is not None:
            parts.append(f"(HTTP {self.status})")
        if self.detail:
            parts.append(f"| {self.detail[:500]}")
        return " ".join(parts)


class ExtractionError(UpstreamServiceError):
    def __init__(self, message: str, status: Optional[int] = None, detail: Optional[str] = None):
        super().__init__("Extraction service", message, status=status, detail=detail)


class PubChemError(UpstreamServiceError):
    def __init__(self, message: str, status: Optional[int] = None, detail: Optional[str] = None):
        super().__init__("PubChem", message, status=status, detail=detail)
