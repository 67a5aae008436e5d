import random
import time


class Host:
    """Randomness and blocking delay as seen by the interpreter.

    Embedders replace this object to make runs deterministic or to make a
    `sleep` interruptible.
    """
    def uniform_integer(self, low: int, high: int) -> int:
        return random.randint(low, high)

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
