from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UseCaseRequest:
    """Input of a use case."""


@dataclass(frozen=True)
class UseCaseResponse:
    """Output of a use case; failures are reported, not raised."""
    success: bool = True
    error: Optional[str] = None


class UseCase(ABC):
    @abstractmethod
    def execute(self, request: UseCaseRequest) -> UseCaseResponse:
        ...
