from typing import Iterable, List


def greet(names: Iterable[str]) -> List[str]:
    return [f"Hello, {name}!" for name in names]
