from abc import ABC, abstractmethod
from typing import TextIO
from ..domain.models import FeeReport


class Presenter(ABC):
    @abstractmethod
    def render(self, report: FeeReport, out: TextIO) -> None: ...
