"""Per-slot request sequence numbers for discarding superseded responses."""


class RequestSequencer:
    def __init__(self) -> None:
        self._latest: dict[str, int] = {}

    def next(self, slot: str) -> int:
        seq = self._latest.get(slot, 0) + 1
        self._latest[slot] = seq
        return seq

    def is_latest(self, slot: str, seq: int) -> bool:
        return self._latest.get(slot) == seq
