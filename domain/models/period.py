from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class Period:
	amount: int
	unit: str  # H, D, M or Y
	duration: timedelta

	@property
	def text(self) -> str:
		return f'{self.amount}{self.unit}'

	def __str__(self) -> str:
		return self.text
