"""Tests for PastelBlockchainOperations against a canned proxy."""

from __future__ import annotations

import pytest

from pastel_rpc.operations import (
    PastelBlockchainOperations,
    TICKET_TYPES,
    flatten_ticket_rows,
)
from pastel_rpc.proxy.errors import NetworkError, RpcError

BEST_HASH = "00" * 32
REG_TXID = "ab" * 32
ACT_TXID = "cd" * 32


class FakeProxy:
    """Answers ``call(method, *params)`` from a dict keyed by (method, *params)."""

    def __init__(self, responses: dict) -> None:
        self.responses = responses
        self.calls: list[tuple] = []

    async def call(self, method, *params):
        key = (method, *params)
        self.calls.append(key)
        value = self.responses.get(key)
        if isinstance(value, Exception):
            raise value
        return value


def _chain(height: int = 250_000) -> dict:
    return {
        ("getbestblockhash",): BEST_HASH,
        ("getblock", BEST_HASH): {"height": height, "hash": BEST_HASH},
    }


def _supernode_views() -> dict:
    return {
        ("masternodelist", "full"): {
            "aa-0": "ENABLED 170009 PtAddr1 1700000000 172800 1699990000 249990 1.2.3.4:9933",
            "bb-1": "ENABLED 170009 PtAddr2 1700000100 86400 0 0 5.6.7.8:9933",
        },
        ("masternodelist", "rank"): {"aa-0": "1", "bb-1": "2"},
        ("masternodelist", "pubkey"): {"aa-0": "pub-a", "bb-1": "pub-b"},
        ("masternodelist", "extra"): {
            "aa-0": {"extAddress": "1.2.3.4:4444", "extP2P": "1.2.3.4:14445", "extKey": "jPastelA"},
            "bb-1": {"extAddress": "5.6.7.8:4444", "extP2P": "5.6.7.8:14445", "extKey": "jPastelB"},
        },
    }


def _ops(responses: dict) -> tuple[PastelBlockchainOperations, FakeProxy]:
    proxy = FakeProxy(responses)
    return PastelBlockchainOperations(proxy), proxy  # type: ignore[arg-type]


class TestInitialization:
    def test_uninitialized_proxy(self) -> None:
        with pytest.raises(RuntimeError):
            PastelBlockchainOperations().proxy

    @pytest.mark.asyncio
    async def test_initialize_keeps_given_proxy(self) -> None:
        ops, proxy = _ops({})
        assert (await ops.initialize()).proxy is proxy


class TestBlocks:
    @pytest.mark.asyncio
    async def test_height(self) -> None:
        ops, _ = _ops(_chain(123))
        assert await ops.get_current_block_height() == 123

    @pytest.mark.asyncio
    async def test_height_and_hash(self) -> None:
        ops, _ = _ops(_chain(123))
        assert await ops.get_current_block_height_and_hash() == {
            "best_block_hash": BEST_HASH,
            "best_block_height": 123,
        }

    @pytest.mark.asyncio
    async def test_previous_block(self) -> None:
        responses = _chain(100)
        responses[("getblockhash", 99)] = "prev"
        responses[("getblock", "prev")] = {"merkleroot": "mr"}
        ops, _ = _ops(responses)
        assert await ops.get_previous_block_hash_and_merkle_root() == {
            "previous_block_hash": "prev",
            "previous_block_merkle_root": "mr",
            "previous_block_height": 99,
        }

    @pytest.mark.asyncio
    async def test_get_block_sends_string(self) -> None:
        responses = {("getblock", "42"): {"height": 42}}
        ops, proxy = _ops(responses)
        assert await ops.get_block(42) == {"height": 42}
        assert proxy.calls == [("getblock", "42")]

    @pytest.mark.asyncio
    async def test_last_block(self) -> None:
        responses = _chain(7)
        responses[("getblock", "7")] = {"height": 7, "tx": []}
        ops, _ = _ops(responses)
        assert (await ops.get_last_block_data())["tx"] == []

    @pytest.mark.asyncio
    async def test_errors_propagate(self) -> None:
        ops, _ = _ops({("getbestblockhash",): NetworkError("down")})
        with pytest.raises(NetworkError):
            await ops.get_current_block_height()


class TestAddressesAndTransactions:
    @pytest.mark.asyncio
    async def test_balance(self) -> None:
        ops, proxy = _ops({("z_getbalance", "PtAddr"): 12.5})
        assert await ops.check_address_balance("PtAddr") == 12.5

    @pytest.mark.asyncio
    async def test_raw_transaction_verbose(self) -> None:
        ops, proxy = _ops({("getrawtransaction", "tx1", 1): {"txid": "tx1"}})
        assert await ops.get_raw_transaction("tx1") == {"txid": "tx1"}


class TestPastelId:
    @pytest.mark.asyncio
    async def test_verify_argument_order(self) -> None:
        key = ("pastelid", "verify", "hello", "sig", "jPastel", "ed448")
        ops, proxy = _ops({key: {"verification": "OK"}})
        assert await ops.verify_message_with_pastelid("jPastel", "hello", "sig") == "OK"
        assert proxy.calls == [key]


class TestSupernodes:
    @pytest.mark.asyncio
    async def test_top(self) -> None:
        ops, _ = _ops({("masternode", "top"): {"250000": []}})
        assert await ops.check_masternode_top() == {"250000": []}

    @pytest.mark.asyncio
    async def test_list_merges_views(self) -> None:
        ops, _ = _ops(_supernode_views())
        supernodes = await ops.check_supernode_list()
        entry = supernodes["aa-0"]
        assert entry["supernode_status"] == "ENABLED"
        assert entry["supernode_psl_address"] == "PtAddr1"
        assert entry["lastseentime"] == "2023-11-14T22:13:20Z"
        assert entry["activeseconds"] == 172800
        assert entry["activedays"] == 2
        assert entry["lastpaidblock"] == 249990
        assert entry["rank"] == 1
        assert entry["pubkey"] == "pub-a"
        assert entry["extKey"] == "jPastelA"
        assert entry["ipaddress_port"] == "1.2.3.4:9933"

    @pytest.mark.asyncio
    async def test_lookup_by_pastelid(self) -> None:
        ops, _ = _ops(_supernode_views())
        assert list(await ops.get_sn_data_from_pastelid("jPastelB")) == ["bb-1"]

    @pytest.mark.asyncio
    async def test_lookup_by_pubkey(self) -> None:
        ops, _ = _ops(_supernode_views())
        assert list(await ops.get_sn_data_from_sn_pubkey("pub-a")) == ["aa-0"]

    @pytest.mark.asyncio
    async def test_lookup_no_match(self) -> None:
        ops, _ = _ops(_supernode_views())
        assert await ops.get_sn_data_from_pastelid("jNobody") == {}


class TestTickets:
    @pytest.mark.asyncio
    async def test_missing_ticket(self) -> None:
        ops, _ = _ops({("tickets", "get", REG_TXID): None})
        assert await ops.get_ticket(REG_TXID) is None

    @pytest.mark.asyncio
    async def test_nft_ticket_with_activation(self) -> None:
        responses = _chain(250_000)
        responses[("tickets", "get", REG_TXID)] = {
            "height": 240_000,
            "ticket": {"type": "nft-reg"},
            "txid": REG_TXID,
        }
        responses[("getblock", "240000")] = {"time": 1700000000}
        responses[("tickets", "find", "act", REG_TXID)] = {"ticket": {"type": "nft-act"}}
        ops, _ = _ops(responses)

        ticket = await ops.get_ticket(REG_TXID)
        assert ticket["reg_ticket_block_timestamp_utc_iso"] == "2023-11-14T22:13:20Z"
        assert ticket["activation_ticket"] == {"ticket": {"type": "nft-act"}}

    @pytest.mark.asyncio
    async def test_activation_not_found_yet(self) -> None:
        responses = _chain(250_000)
        responses[("tickets", "get", REG_TXID)] = {"height": 249_999, "ticket": {"type": "action-reg"}}
        responses[("getblock", "249999")] = {"time": 0}
        ops, _ = _ops(responses)
        ticket = await ops.get_ticket(REG_TXID)
        assert "No activation ticket found" in ticket["activation_ticket"]

    @pytest.mark.asyncio
    async def test_no_activation_needed(self) -> None:
        responses = _chain(250_000)
        responses[("tickets", "get", REG_TXID)] = {"height": 10, "ticket": {"type": "username-change"}}
        responses[("getblock", "10")] = {"time": 0}
        ops, proxy = _ops(responses)
        ticket = await ops.get_ticket(REG_TXID)
        assert ticket["activation_ticket"].startswith("No activation ticket needed")
        assert not any(call[:2] == ("tickets", "find") for call in proxy.calls)

    def test_flatten_rows(self) -> None:
        rows = flatten_ticket_rows(
            [{"txid": "t1", "height": 5, "ticket": {"username": "alice", "pastelID": "jA"}}]
        )
        assert rows == {0: {"username": "alice", "pastelID": "jA", "txid": "t1", "height": 5}}

    @pytest.mark.asyncio
    async def test_all_tickets_skips_empty_types(self) -> None:
        responses = {("tickets", "list", t): None for t in TICKET_TYPES}
        responses[("tickets", "list", "id")] = [{"txid": "t1", "height": 1, "ticket": {"type": "pastelid"}}]
        ops, proxy = _ops(responses)
        tickets = await ops.get_all_tickets(verbose=True)
        assert list(tickets) == ["id"]
        assert len(proxy.calls) == len(TICKET_TYPES)


class TestCollections:
    @staticmethod
    def _collection(ticket_type: str, item_type: str = "nft") -> dict:
        responses = _chain(250_000)
        ticket: dict = {"type": ticket_type}
        if ticket_type == "collection-reg":
            ticket["collection_ticket"] = {"item_type": item_type}
        responses[("tickets", "get", REG_TXID)] = {"height": 240_000, "ticket": ticket, "txid": REG_TXID}
        responses[("getblock", "240000")] = {"time": 0}
        responses[("tickets", "find", "collection-act", REG_TXID)] = {
            "txid": ACT_TXID,
            "ticket": {"type": "collection-act"},
        }
        return responses

    @pytest.mark.asyncio
    @pytest.mark.parametrize("item_type", ["nft", "sense"])
    async def test_reg_ticket_searches_item_type(self, item_type: str) -> None:
        responses = self._collection("collection-reg", item_type)
        responses[("tickets", "find", item_type, ACT_TXID)] = [{"txid": "r1"}]
        ops, _ = _ops(responses)
        assert await ops.get_registration_tickets_for_collection(REG_TXID) == [{"txid": "r1"}]

    @pytest.mark.asyncio
    async def test_act_ticket_searches_action_by_own_txid(self) -> None:
        responses = self._collection("collection-act")
        responses[("tickets", "find", "action", REG_TXID)] = [{"txid": "a1"}]
        ops, proxy = _ops(responses)
        assert await ops.get_registration_tickets_for_collection(REG_TXID) == [{"txid": "a1"}]
        assert ("tickets", "find", "nft", REG_TXID) not in proxy.calls

    @pytest.mark.asyncio
    async def test_act_ticket_falls_back_to_nft(self) -> None:
        responses = self._collection("collection-act")
        responses[("tickets", "find", "action", REG_TXID)] = RpcError(-1, "not found")
        responses[("tickets", "find", "nft", REG_TXID)] = [{"txid": "n1"}]
        ops, _ = _ops(responses)
        assert await ops.get_registration_tickets_for_collection(REG_TXID) == [{"txid": "n1"}]

    @pytest.mark.asyncio
    async def test_act_ticket_both_lookups_fail(self) -> None:
        responses = self._collection("collection-act")
        responses[("tickets", "find", "action", REG_TXID)] = RpcError(-1, "not found")
        responses[("tickets", "find", "nft", REG_TXID)] = NetworkError("refused")
        ops, _ = _ops(responses)
        result = await ops.get_registration_tickets_for_collection(REG_TXID)
        assert result == "Unable to find the activation ticket in the blockchain"

    @pytest.mark.asyncio
    async def test_reg_ticket_lookup_failure_has_no_fallback(self) -> None:
        responses = self._collection("collection-reg", "nft")
        responses[("tickets", "find", "nft", ACT_TXID)] = RpcError(-1, "not found")
        ops, proxy = _ops(responses)
        assert await ops.get_registration_tickets_for_collection(REG_TXID) is None
        assert proxy.calls.count(("tickets", "find", "nft", ACT_TXID)) == 1

    @pytest.mark.asyncio
    async def test_unknown_item_type(self) -> None:
        ops, _ = _ops(self._collection("collection-reg", "cascade"))
        result = await ops.get_registration_tickets_for_collection(REG_TXID)
        assert result == (
            f"The txid given ({REG_TXID}) is not a valid activation ticket txid for a collection ticket"
        )

    @pytest.mark.asyncio
    async def test_not_a_collection_ticket(self) -> None:
        ops, _ = _ops(self._collection("nft-reg"))
        result = await ops.get_registration_tickets_for_collection(REG_TXID)
        assert result == "The ticket type is neither collection-reg nor collection-act"

    @pytest.mark.asyncio
    async def test_missing_ticket(self) -> None:
        ops, _ = _ops({})
        assert await ops.get_registration_tickets_for_collection(REG_TXID) is None


class TestUsernames:
    @staticmethod
    def _usernames() -> dict:
        return {
            ("tickets", "list", "username"): [
                {"ticket": {"username": "alice", "pastelID": "jA"}},
                {"ticket": {"username": "bob", "pastelID": "jB"}},
                {"ticket": {"username": "bobby", "pastelID": "jB"}},
            ]
        }

    @pytest.mark.asyncio
    async def test_single_username(self) -> None:
        ops, _ = _ops(self._usernames())
        assert await ops.get_usernames_from_pastelid("jA") == "alice"

    @pytest.mark.asyncio
    async def test_multiple_usernames(self) -> None:
        ops, _ = _ops(self._usernames())
        assert await ops.get_usernames_from_pastelid("jB") == ["bob", "bobby"]

    @pytest.mark.asyncio
    async def test_unknown_pastelid(self) -> None:
        ops, _ = _ops(self._usernames())
        assert await ops.get_usernames_from_pastelid("jZ") is None

    @pytest.mark.asyncio
    async def test_pastelid_from_username(self) -> None:
        ops, _ = _ops(self._usernames())
        assert await ops.get_pastelid_from_username("bobby") == "jB"
        assert await ops.get_pastelid_from_username("carol") is None


class TestTestnetPastelIdDispenser:
    @pytest.mark.asyncio
    async def test_returns_key_file_base64(self, tmp_path) -> None:
        (tmp_path / "jNewId").write_bytes(b"secret-key")
        ops, proxy = _ops({("pastelid", "newkey", "pw"): {"pastelid": "jNewId"}})
        result = await ops.testnet_pastelid_file_dispenser("pw", verbose=True, keys_dir=tmp_path)
        assert result == {"pastelid": "jNewId", "pastelid_data": "c2VjcmV0LWtleQ=="}
        assert proxy.calls == [("pastelid", "newkey", "pw")]

    @pytest.mark.asyncio
    async def test_missing_key_file(self, tmp_path) -> None:
        ops, _ = _ops({("pastelid", "newkey", "pw"): {"pastelid": "jNewId"}})
        result = await ops.testnet_pastelid_file_dispenser("pw", keys_dir=tmp_path)
        assert result == {"pastelid": "jNewId", "pastelid_data": ""}

    @pytest.mark.asyncio
    async def test_response_without_pastelid(self, tmp_path) -> None:
        ops, _ = _ops({("pastelid", "newkey", "pw"): {"error": "bad passphrase"}})
        result = await ops.testnet_pastelid_file_dispenser("pw", keys_dir=tmp_path)
        assert result == {"pastelid": "", "pastelid_data": ""}
