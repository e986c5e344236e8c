import sys
from typing import List

from greeting.format import greet


def main(args: List[str]) -> None:
    for line in greet(args or ["world"]):
        print(line)
    sys.stdout.flush()
