from asyncio import sleep
import random

from ..application.use_cases.session_store import INetwork


class NetworkError(Exception):
    pass


class SimulatedNetwork(INetwork):
    """Имитация запроса к API: задержка и, при желании, случайный отказ."""

    def __init__(self, latency_ms: int = 1000, failure_rate: float = 0.0):
        self.latency_ms = latency_ms
        self.failure_rate = failure_rate

    async def roundtrip(self) -> None:
        if self.latency_ms > 0:
            await sleep(self.latency_ms / 1000)
        if self.failure_rate and random.random() < self.failure_rate:
            raise NetworkError("Simulated network failure")
