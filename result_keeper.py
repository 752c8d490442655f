from math import isnan
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class ResultKeeper(Generic[T]):
    """
    Keeps the `size` lowest scoring results it has been given, lowest first.

    Iterating consumes the keeper, handing back payloads from best to worst

    >>> keeper = ResultKeeper(size=2)
    >>> keeper.add(3.0, "three")
    >>> keeper.add(1.0, "one")
    >>> keeper.add(2.0, "two")
    >>> keeper.best()
    'one'
    >>> list(keeper)
    ['one', 'two']
    >>> list(keeper)
    []
    """

    def __init__(self, size: int = 1):
        if size < 1:
            raise ValueError("ResultKeeper size must be at least 1")
        self.size = size
        self._results: List[Tuple[float, T]] = []

    def add(self, score: float, result: T) -> None:
        if isnan(score):
            raise ValueError("Cannot rank a NaN score")
        self._results.append((score, result))
        # Stable, so that of equal scores the earliest added wins
        self._results.sort(key=lambda x: x[0])
        del self._results[self.size:]

    def best(self) -> Optional[T]:
        if not self._results:
            return None
        return self._results[0][1]

    def scores(self) -> List[float]:
        return [score for score, _ in self._results]

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if not self._results:
            raise StopIteration
        return self._results.pop(0)[1]
