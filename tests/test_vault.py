"""
Tests for the LEGENDO SYNC Vault

Covers:
- AES-GCM crypto unit
- Entry store
- Expiry sweeper
- Vault facade
"""

import base64
import dataclasses
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from legendo_sync.vault import (
    NONCE_SIZE,
    TAG_SIZE,
    AuthenticationFailure,
    CryptoUnit,
    DuplicateEntryError,
    EncryptionError,
    Entry,
    EntryNotFoundError,
    EntryStore,
    ExpirySweeper,
    InvariantViolation,
    PayloadError,
    SyncVault,
    VaultConfig,
    create_vault,
    generate_key,
    load_key,
)


def _flip_first_bit(data: bytes) -> bytes:
    return bytes([data[0] ^ 0x01]) + data[1:]


def _make_entry(entry_id: str, created_at) -> Entry:
    return Entry(
        entry_id=entry_id,
        ciphertext=b"ct",
        nonce=b"n" * NONCE_SIZE,
        auth_tag=b"t" * TAG_SIZE,
        created_at=created_at,
    )


# ============================================================================
# Crypto Unit Tests
# ============================================================================

class TestCryptoUnit:
    """Tests for authenticated encryption."""

    @pytest.fixture
    def crypto(self, encryption_key):
        return CryptoUnit(encryption_key)

    def test_round_trip(self, crypto):
        sealed = crypto.encrypt(b"HALO BA LEGENDO")
        assert sealed.ciphertext != b"HALO BA LEGENDO"
        assert len(sealed.nonce) == NONCE_SIZE
        assert len(sealed.auth_tag) == TAG_SIZE
        assert crypto.decrypt(sealed.ciphertext, sealed.nonce, sealed.auth_tag) == b"HALO BA LEGENDO"

    def test_empty_plaintext(self, crypto):
        sealed = crypto.encrypt(b"")
        assert sealed.ciphertext == b""
        assert crypto.decrypt(sealed.ciphertext, sealed.nonce, sealed.auth_tag) == b""

    def test_fresh_nonce_per_call(self, crypto):
        nonces = {crypto.encrypt(b"same").nonce for _ in range(100)}
        assert len(nonces) == 100

    @pytest.mark.parametrize("part", ["ciphertext", "nonce", "auth_tag"])
    def test_tampering_fails_authentication(self, crypto, part):
        sealed = crypto.encrypt(b"payload bytes")
        parts = {
            "ciphertext": sealed.ciphertext,
            "nonce": sealed.nonce,
            "auth_tag": sealed.auth_tag,
        }
        parts[part] = _flip_first_bit(parts[part])

        with pytest.raises(AuthenticationFailure):
            crypto.decrypt(parts["ciphertext"], parts["nonce"], parts["auth_tag"])

    def test_wrong_key_fails_authentication(self, crypto):
        sealed = crypto.encrypt(b"secret")
        other = CryptoUnit(generate_key())
        with pytest.raises(AuthenticationFailure):
            other.decrypt(sealed.ciphertext, sealed.nonce, sealed.auth_tag)

    def test_associated_data_is_bound(self, crypto):
        sealed = crypto.encrypt(b"secret", associated_data=b"entry-a")
        assert crypto.decrypt(
            sealed.ciphertext, sealed.nonce, sealed.auth_tag, associated_data=b"entry-a"
        ) == b"secret"
        with pytest.raises(AuthenticationFailure):
            crypto.decrypt(
                sealed.ciphertext, sealed.nonce, sealed.auth_tag, associated_data=b"entry-b"
            )

    def test_malformed_nonce_fails_authentication(self, crypto):
        sealed = crypto.encrypt(b"secret")
        with pytest.raises(AuthenticationFailure):
            crypto.decrypt(sealed.ciphertext, sealed.nonce[:-1], sealed.auth_tag)

    def test_invalid_key_size(self):
        with pytest.raises(EncryptionError):
            CryptoUnit(b"short")

    def test_load_key(self):
        key = generate_key()
        assert load_key(base64.b64encode(key).decode()) == key

    def test_load_key_rejects_bad_input(self):
        with pytest.raises(EncryptionError):
            load_key("not base64!!")
        with pytest.raises(EncryptionError):
            load_key(base64.b64encode(b"too short").decode())


# ============================================================================
# Entry Store Tests
# ============================================================================

class TestEntryStore:
    """Tests for the in-memory entry store."""

    def test_put_and_get(self, clock):
        store = EntryStore()
        entry = _make_entry("a", clock())
        store.put(entry)

        assert store.get("a") is entry
        assert "a" in store
        assert len(store) == 1

    def test_get_missing(self):
        assert EntryStore().get("missing") is None

    def test_duplicate_put_is_invariant_violation(self, clock):
        store = EntryStore()
        store.put(_make_entry("a", clock()))

        with pytest.raises(DuplicateEntryError) as exc_info:
            store.put(_make_entry("a", clock()))
        assert isinstance(exc_info.value, InvariantViolation)

    def test_delete_is_idempotent(self, clock):
        store = EntryStore()
        store.put(_make_entry("a", clock()))

        assert store.delete("a") is True
        assert store.delete("a") is False
        assert store.delete("never-existed") is False

    def test_scan_allows_mutation(self, clock):
        store = EntryStore()
        for i in range(5):
            store.put(_make_entry(f"e{i}", clock()))

        seen = []
        for entry_id, _ in store.scan():
            seen.append(entry_id)
            store.delete(entry_id)

        assert sorted(seen) == [f"e{i}" for i in range(5)]
        assert len(store) == 0

    def test_clear(self, clock):
        store = EntryStore()
        store.put(_make_entry("a", clock()))
        store.put(_make_entry("b", clock()))

        assert store.clear() == 2
        assert len(store) == 0


# ============================================================================
# Expiry Sweeper Tests
# ============================================================================

class TestExpirySweeper:
    """Tests for age-based expiry."""

    def test_deletes_only_expired(self, clock):
        store = EntryStore()
        store.put(_make_entry("old", clock()))
        clock.advance(50)
        store.put(_make_entry("new", clock()))
        clock.advance(20)

        sweeper = ExpirySweeper(store, interval=10, max_age=60, clock=clock)
        assert sweeper.sweep_now() == 1
        assert store.get("old") is None
        assert store.get("new") is not None
        assert sweeper.total_swept == 1
        assert sweeper.last_sweep_at == clock()

    def test_second_sweep_removes_nothing(self, clock):
        store = EntryStore()
        store.put(_make_entry("a", clock()))
        clock.advance(120)

        sweeper = ExpirySweeper(store, interval=10, max_age=60, clock=clock)
        assert sweeper.sweep_now() == 1
        assert sweeper.sweep_now() == 0

    def test_per_entry_failure_does_not_abort_sweep(self, clock):
        class FlakyStore(EntryStore):
            def delete(self, entry_id):
                if entry_id == "bad":
                    raise RuntimeError("boom")
                return super().delete(entry_id)

        store = FlakyStore()
        for entry_id in ("a", "bad", "b"):
            store.put(_make_entry(entry_id, clock()))
        clock.advance(120)

        sweeper = ExpirySweeper(store, interval=10, max_age=60, clock=clock)
        assert sweeper.sweep_now() == 2
        assert "bad" in store
        assert len(store) == 1

    def test_start_stop_idempotent(self):
        sweeper = ExpirySweeper(EntryStore(), interval=60, max_age=60)

        sweeper.start()
        sweeper.start()
        assert sweeper.is_running

        sweeper.stop()
        sweeper.stop()
        assert not sweeper.is_running

    @pytest.mark.parametrize("interval,max_age", [(0, 60), (60, 0), (-1, 60)])
    def test_rejects_non_positive_durations(self, interval, max_age):
        with pytest.raises(ValueError):
            ExpirySweeper(EntryStore(), interval=interval, max_age=max_age)


# ============================================================================
# Vault Facade Tests
# ============================================================================

class TestSyncVault:
    """Tests for the vault facade."""

    def test_store_and_retrieve(self, vault):
        entry_id = vault.store({"title": "doc"})
        assert vault.retrieve(entry_id) == {"title": "doc"}

    def test_retrieve_is_non_destructive(self, vault):
        entry_id = vault.store(["a", 1, None])
        assert vault.retrieve(entry_id) == ["a", 1, None]
        assert vault.retrieve(entry_id) == ["a", 1, None]

    @pytest.mark.parametrize("payload", [None, 0, "text", [], {"nested": {"list": [1.5, True]}}])
    def test_json_payloads_round_trip(self, vault, payload):
        assert vault.retrieve(vault.store(payload)) == payload

    def test_retrieve_nonexistent(self, vault):
        with pytest.raises(EntryNotFoundError) as exc_info:
            vault.retrieve("nonexistent-id")
        assert exc_info.value.entry_id == "nonexistent-id"

    def test_unserializable_payload(self, vault):
        with pytest.raises(PayloadError):
            vault.store({"bad": object()})
        assert len(vault) == 0

    def test_ids_are_unique(self, vault):
        ids = [vault.store({"n": i}) for i in range(1000)]
        assert len(set(ids)) == 1000

    def test_concurrent_identical_stores(self, vault):
        with ThreadPoolExecutor(max_workers=2) as pool:
            ids = list(pool.map(vault.store, [{"title": "doc"}, {"title": "doc"}]))

        assert ids[0] != ids[1]
        assert vault.retrieve(ids[0]) == {"title": "doc"}
        assert vault.retrieve(ids[1]) == {"title": "doc"}

    @pytest.mark.parametrize("part", ["ciphertext", "nonce", "auth_tag"])
    def test_tampered_entry_is_not_found(self, encryption_key, part):
        store = EntryStore()
        vault = SyncVault(VaultConfig(key=encryption_key), store=store)
        entry_id = vault.store({"title": "doc"})

        entry = store.get(entry_id)
        store.delete(entry_id)
        store.put(dataclasses.replace(entry, **{part: _flip_first_bit(getattr(entry, part))}))

        with pytest.raises(EntryNotFoundError):
            vault.retrieve(entry_id)

    def test_entry_moved_to_other_id_is_not_found(self, encryption_key):
        store = EntryStore()
        vault = SyncVault(VaultConfig(key=encryption_key), store=store)
        entry_id = vault.store({"title": "doc"})

        moved = dataclasses.replace(store.get(entry_id), entry_id="other-id")
        store.put(moved)

        with pytest.raises(EntryNotFoundError):
            vault.retrieve("other-id")

    def test_foreign_key_is_not_found(self, encryption_key):
        store = EntryStore()
        writer = SyncVault(VaultConfig(key=encryption_key), store=store)
        reader = SyncVault(VaultConfig(key=generate_key()), store=store)

        entry_id = writer.store({"title": "doc"})
        with pytest.raises(EntryNotFoundError):
            reader.retrieve(entry_id)

    def test_expiry(self, encryption_key, clock):
        vault = SyncVault(VaultConfig(key=encryption_key, max_age=60, clock=clock))
        entry_id = vault.store({"title": "doc"})

        clock.advance(59)
        assert vault.sweep_now() == 0
        assert vault.retrieve(entry_id) == {"title": "doc"}

        clock.advance(2)
        assert vault.sweep_now() == 1
        with pytest.raises(EntryNotFoundError):
            vault.retrieve(entry_id)

    def test_read_does_not_extend_lifetime(self, encryption_key, clock):
        vault = SyncVault(VaultConfig(key=encryption_key, max_age=60, clock=clock))
        entry_id = vault.store("x")

        clock.advance(50)
        vault.retrieve(entry_id)
        clock.advance(20)

        assert vault.sweep_now() == 1

    def test_delete(self, vault):
        entry_id = vault.store("x")
        assert vault.delete(entry_id) is True
        assert vault.delete(entry_id) is False
        with pytest.raises(EntryNotFoundError):
            vault.retrieve(entry_id)

    def test_status(self, encryption_key, clock):
        vault = SyncVault(
            VaultConfig(key=encryption_key, sweep_interval=30, max_age=60, clock=clock)
        )
        vault.store("a")
        vault.store("b")
        clock.advance(10)

        status = vault.status()
        assert status["entry_count"] == 2
        assert status["uptime_seconds"] == 10
        assert status["sweeping"] is False
        assert status["sweep_interval"] == 30
        assert status["max_age"] == 60
        assert status["last_sweep_at"] is None
        assert status["total_swept"] == 0

        # Snapshot only
        assert vault.status()["entry_count"] == 2

    def test_start_and_stop_sweeping(self, vault):
        vault.start_sweeping(interval=100, max_age=200)
        assert vault.is_sweeping
        assert vault.status()["sweep_interval"] == 100
        assert vault.status()["max_age"] == 200

        vault.stop_sweeping()
        assert not vault.is_sweeping

    def test_reconfigure_keeps_sweep_history(self, encryption_key, clock):
        vault = SyncVault(VaultConfig(key=encryption_key, max_age=60, clock=clock))
        vault.store("old")
        clock.advance(61)
        assert vault.sweep_now() == 1
        swept_at = vault.status()["last_sweep_at"]

        try:
            vault.start_sweeping(interval=100, max_age=200)
            status = vault.status()
            assert status["total_swept"] == 1
            assert status["last_sweep_at"] == swept_at
            assert status["max_age"] == 200
        finally:
            vault.shutdown()

    def test_shutdown_clears_entries(self, encryption_key):
        vault = SyncVault(VaultConfig(key=encryption_key))
        vault.start_sweeping()
        vault.store("x")

        vault.shutdown()
        assert len(vault) == 0
        assert not vault.is_sweeping

    def test_ephemeral_key(self):
        vault = SyncVault()
        entry_id = vault.store({"ok": True})
        assert vault.retrieve(entry_id) == {"ok": True}

    def test_create_vault(self, encryption_key):
        vault = create_vault(key=encryption_key, sweep_interval=60, max_age=120)
        try:
            assert vault.is_sweeping
            assert vault.retrieve(vault.store(1)) == 1
        finally:
            vault.shutdown()

    @pytest.mark.slow
    def test_background_sweep_expires_entry(self, encryption_key):
        vault = SyncVault(VaultConfig(key=encryption_key, sweep_interval=0.5, max_age=1.0))
        vault.start_sweeping()
        try:
            entry_id = vault.store({"title": "doc"})
            assert vault.retrieve(entry_id) == {"title": "doc"}

            time.sleep(1.6)

            with pytest.raises(EntryNotFoundError):
                vault.retrieve(entry_id)
        finally:
            vault.shutdown()
