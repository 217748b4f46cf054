import random

from contentgate.core.keys import K_DEVICE_ID
from contentgate.workflows.gate_config import DEVICE_ID_ALPHABET
from contentgate.workflows.identity import DeviceIdentity, current_device_model, generate_device_id
from contentgate.workflows.store import MemoryStore


class CountingStore(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.writes = 0

    def set_string(self, key: str, value: str) -> None:
        self.writes += 1
        super().set_string(key, value)


def test_device_id_generated_once_and_persisted() -> None:
    store = CountingStore()
    identity = DeviceIdentity(store)

    first = identity.get_device_id()
    second = identity.get_device_id()

    assert first == second
    assert 10 <= len(first) <= 20
    assert all(ch in DEVICE_ID_ALPHABET for ch in first)
    assert store.get_string(K_DEVICE_ID) == first
    assert store.writes == 1


def test_device_id_reused_across_providers() -> None:
    store = MemoryStore({K_DEVICE_ID: "seeded12345"})
    assert DeviceIdentity(store).get_device_id() == "seeded12345"


def test_generate_device_id_lengths_cover_range() -> None:
    rng = random.Random(7)
    lengths = {len(generate_device_id(rng)) for _ in range(500)}
    assert min(lengths) == 10
    assert max(lengths) == 20


def test_generate_device_id_is_seedable() -> None:
    assert generate_device_id(random.Random(3)) == generate_device_id(random.Random(3))


def test_current_device_model_env_override(monkeypatch) -> None:
    monkeypatch.setenv("CONTENTGATE_DEVICE_MODEL", "iPad")
    assert current_device_model() == "iPad"
    monkeypatch.delenv("CONTENTGATE_DEVICE_MODEL")
    assert current_device_model()
