"""
Pastel blockchain operations.

Convenience wrappers naming particular pasteld RPC methods. Every call
goes through one ``AsyncAuthServiceProxy`` and therefore inherits its
retry/backoff behavior.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .config import PASTEL_DIR
from .proxy.engine import AsyncAuthServiceProxy, create_rpc_connection
from .proxy.errors import RpcProxyError
from .utils import unix_to_iso


SUPERNODE_COLUMNS = (
    "supernode_status",
    "protocol_version",
    "supernode_psl_address",
    "lastseentime",
    "activeseconds",
    "lastpaidtime",
    "lastpaidblock",
    "ipaddress_port",
)
TIMESTAMP_COLUMNS = ("lastseentime", "lastpaidtime")
INTEGER_COLUMNS = ("activeseconds", "lastpaidblock")

TICKET_TYPES = (
    "id",
    "nft",
    "offer",
    "accept",
    "transfer",
    "royalty",
    "username",
    "ethereumaddress",
    "action",
    "action-act",
)

# registration ticket type -> type of its activation ticket
ACTIVATION_TICKET_TYPES = {
    "nft-reg": "act",
    "action-reg": "action-act",
    "collection-reg": "collection-act",
}

# collection item type -> ticket type searched for its registrations
COLLECTION_ITEM_TICKET_TYPES = {"sense": "sense", "nft": "nft", "": "action"}

TESTNET_PASTELKEYS_DIR = PASTEL_DIR / "testnet3" / "pastelkeys"


def _parse_supernode_entry(details: str) -> dict[str, Any]:
    values = details.split()
    entry: dict[str, Any] = dict(zip(SUPERNODE_COLUMNS, values))
    for column in TIMESTAMP_COLUMNS:
        if column in entry:
            entry[column] = unix_to_iso(entry[column])
    for column in INTEGER_COLUMNS:
        if column in entry:
            entry[column] = int(entry[column])
    if "activeseconds" in entry:
        entry["activedays"] = entry["activeseconds"] / 86400
    return entry


def flatten_ticket_rows(tickets: list[dict[str, Any]]) -> dict[int, dict[str, Any]]:
    """Lift ``ticket`` fields next to ``txid``/``height``, keyed by row index."""
    rows: dict[int, dict[str, Any]] = {}
    for index, item in enumerate(tickets):
        row = dict(item.get("ticket") or {})
        row["txid"] = item.get("txid")
        row["height"] = item.get("height")
        rows[index] = row
    return rows


class PastelBlockchainOperations:
    def __init__(self, proxy: Optional[AsyncAuthServiceProxy] = None) -> None:
        self._proxy = proxy

    async def initialize(self, **options: Any) -> "PastelBlockchainOperations":
        """Build the proxy from resolved credentials unless one was given."""
        if self._proxy is None:
            self._proxy = create_rpc_connection(**options)
        return self

    @property
    def proxy(self) -> AsyncAuthServiceProxy:
        if self._proxy is None:
            raise RuntimeError("PastelBlockchainOperations is not initialized")
        return self._proxy

    # ============ Blocks ============

    async def get_current_block_height(self) -> int:
        best_block_hash = await self.proxy.call("getbestblockhash")
        best_block = await self.proxy.call("getblock", best_block_hash)
        return best_block["height"]

    async def get_current_block_height_and_hash(self) -> dict[str, Any]:
        best_block_hash = await self.proxy.call("getbestblockhash")
        best_block = await self.proxy.call("getblock", best_block_hash)
        return {
            "best_block_hash": best_block_hash,
            "best_block_height": best_block["height"],
        }

    async def get_previous_block_hash_and_merkle_root(self) -> dict[str, Any]:
        previous_height = await self.get_current_block_height() - 1
        previous_hash = await self.proxy.call("getblockhash", previous_height)
        previous_block = await self.proxy.call("getblock", previous_hash)
        return {
            "previous_block_hash": previous_hash,
            "previous_block_merkle_root": previous_block["merkleroot"],
            "previous_block_height": previous_height,
        }

    async def get_block(self, height_or_hash: int | str) -> dict[str, Any]:
        return await self.proxy.call("getblock", str(height_or_hash))

    async def get_last_block_data(self) -> dict[str, Any]:
        return await self.get_block(await self.get_current_block_height())

    # ============ Addresses & Transactions ============

    async def check_address_balance(self, address: str) -> Any:
        return await self.proxy.call("z_getbalance", address)

    async def get_raw_transaction(self, txid: str) -> dict[str, Any]:
        return await self.proxy.call("getrawtransaction", txid, 1)

    # ============ PastelID ============

    async def verify_message_with_pastelid(
        self,
        pastelid: str,
        message: str,
        signature: str,
        algorithm: str = "ed448",
    ) -> Any:
        result = await self.proxy.call(
            "pastelid", "verify", message, signature, pastelid, algorithm
        )
        return result["verification"]

    # ============ Supernodes ============

    async def check_masternode_top(self) -> Any:
        return await self.proxy.call("masternode", "top")

    async def check_supernode_list(self) -> dict[str, dict[str, Any]]:
        """
        Merge the ``masternodelist`` views into one record per supernode.

        Returns:
            Dict keyed by ``txid_vout`` with the ``full`` columns plus
            ``activedays``, ``rank``, ``pubkey``, ``extAddress``,
            ``extP2P`` and ``extKey``.
        """
        full = await self.proxy.call("masternodelist", "full")
        ranks = await self.proxy.call("masternodelist", "rank")
        pubkeys = await self.proxy.call("masternodelist", "pubkey")
        extras = await self.proxy.call("masternodelist", "extra")

        supernodes = {
            txid_vout: _parse_supernode_entry(details)
            for txid_vout, details in full.items()
        }
        for txid_vout, rank in ranks.items():
            entry = supernodes.get(txid_vout)
            if entry is None:
                continue
            extra = extras.get(txid_vout) or {}
            entry["rank"] = int(rank)
            entry["pubkey"] = pubkeys.get(txid_vout)
            entry["extAddress"] = extra.get("extAddress")
            entry["extP2P"] = extra.get("extP2P")
            entry["extKey"] = extra.get("extKey")
        return supernodes

    async def _filter_supernodes(self, column: str, value: str) -> dict[str, dict[str, Any]]:
        supernodes = await self.check_supernode_list()
        matches = {
            txid_vout: entry
            for txid_vout, entry in supernodes.items()
            if entry.get(column) == value
        }
        if not matches:
            logger.error("Specified machine is not a supernode!")
        return matches

    async def get_sn_data_from_pastelid(self, pastelid: str) -> dict[str, dict[str, Any]]:
        return await self._filter_supernodes("extKey", pastelid)

    async def get_sn_data_from_sn_pubkey(self, pubkey: str) -> dict[str, dict[str, Any]]:
        return await self._filter_supernodes("pubkey", pubkey)

    # ============ Tickets ============

    async def get_ticket(self, txid: str) -> Optional[dict[str, Any]]:
        """
        Fetch a ticket with its block timestamp and activation ticket.

        Returns:
            The ticket dict, or None if the daemon knows no ticket for ``txid``
        """
        ticket = await self.proxy.call("tickets", "get", txid)
        if not ticket:
            return None

        ticket_type = (ticket.get("ticket") or {}).get("type")
        reg_height = int(ticket.get("height", -1))
        latest_height = await self.get_current_block_height()
        if reg_height < 0:
            logger.warning(f"The corresponding reg ticket block height of {reg_height} is less than 0!")
        if reg_height > latest_height:
            logger.info(
                f"The corresponding reg ticket block height of {reg_height} is greater "
                f"than the latest block height of {latest_height}!"
            )

        block = await self.get_block(reg_height)
        ticket["reg_ticket_block_timestamp_utc_iso"] = unix_to_iso(block["time"])

        activation_type = ACTIVATION_TICKET_TYPES.get(ticket_type)
        if activation_type is None:
            ticket["activation_ticket"] = (
                f"No activation ticket needed for this ticket type ({ticket_type})"
            )
            return ticket

        activation = await self.proxy.call("tickets", "find", activation_type, txid)
        if activation:
            ticket["activation_ticket"] = activation
        else:
            ticket["activation_ticket"] = (
                "No activation ticket found for this ticket-- check again soon"
            )
        return ticket

    async def get_registration_tickets_for_collection(
        self, collection_ticket_txid: str
    ) -> Any:
        """
        Find the registration tickets that belong to a collection.

        ``collection_ticket_txid`` may name either the collection-reg ticket
        or its collection-act ticket. The daemon is asked for tickets of the
        collection's item type (``action`` when the type is unknown, falling
        back to ``nft``) that reference the activation txid.

        Returns:
            The daemon's ``tickets find`` answer, a message string when the
            txid is not usable, or None if no ticket exists for the txid
        """
        ticket = await self.get_ticket(collection_ticket_txid)
        if ticket is None:
            return None

        ticket_type = (ticket.get("ticket") or {}).get("type")
        if ticket_type == "collection-reg":
            activation = ticket["activation_ticket"]
            item_type = ticket["ticket"]["collection_ticket"]["item_type"]
        elif ticket_type == "collection-act":
            activation = ticket
            item_type = ""
        else:
            message = "The ticket type is neither collection-reg nor collection-act"
            logger.error(message)
            return message

        if item_type not in COLLECTION_ITEM_TICKET_TYPES:
            return (
                f"The txid given ({collection_ticket_txid}) is not a valid "
                "activation ticket txid for a collection ticket"
            )
        if not isinstance(activation, dict):
            # get_ticket left a "not found yet" message in place of the ticket
            return activation

        activation_txid = activation.get("txid")
        try:
            return await self.proxy.call(
                "tickets", "find", COLLECTION_ITEM_TICKET_TYPES[item_type], activation_txid
            )
        except RpcProxyError as exc:
            logger.error(
                f"Exception occurred while trying to find the activation ticket in the blockchain: {exc}"
            )
            if item_type:
                return None

        try:
            return await self.proxy.call("tickets", "find", "nft", activation_txid)
        except RpcProxyError as exc:
            logger.error(f"Unable to find the activation ticket in the blockchain: {exc}")
            return "Unable to find the activation ticket in the blockchain"

    async def get_all_tickets(self, verbose: bool = False) -> dict[str, dict[int, dict[str, Any]]]:
        if verbose:
            logger.info("Now retrieving all Pastel blockchain tickets...")
        tickets: dict[str, dict[int, dict[str, Any]]] = {}
        for ticket_type in TICKET_TYPES:
            if verbose:
                logger.info(f"Getting {ticket_type} tickets...")
            response = await self.proxy.call("tickets", "list", ticket_type)
            if response:
                tickets[ticket_type] = flatten_ticket_rows(response)
        return tickets

    async def _username_tickets(self) -> list[dict[str, Any]]:
        return await self.proxy.call("tickets", "list", "username") or []

    async def get_usernames_from_pastelid(self, pastelid: str) -> Optional[str | list[str]]:
        usernames = [
            item["ticket"]["username"]
            for item in await self._username_tickets()
            if item.get("ticket", {}).get("pastelID") == pastelid
        ]
        if not usernames:
            return None
        return usernames[0] if len(usernames) == 1 else usernames

    async def get_pastelid_from_username(self, username: str) -> Optional[str]:
        for item in await self._username_tickets():
            ticket = item.get("ticket", {})
            if ticket.get("username") == username:
                return ticket.get("pastelID")
        return None

    # ============ Testnet ============

    async def testnet_pastelid_file_dispenser(
        self,
        password: str,
        verbose: bool = False,
        keys_dir: Optional[Path] = None,
    ) -> dict[str, str]:
        """Create a PastelID and return it with its base64 key file (testnet)."""
        if verbose:
            logger.info("Now generating a pastelid...")
        response = await self.proxy.call("pastelid", "newkey", password)
        if not isinstance(response, dict) or "pastelid" not in response:
            logger.error("There was an issue creating the pastelid!")
            return {"pastelid": "", "pastelid_data": ""}

        pastelid = response["pastelid"]
        if verbose:
            logger.info(f"The pastelid is {pastelid}")
        key_file = (keys_dir or TESTNET_PASTELKEYS_DIR) / pastelid
        try:
            data = base64.b64encode(key_file.read_bytes()).decode("ascii")
        except OSError:
            if verbose:
                logger.info(f"The pastelid file {key_file} does not exist!")
            data = ""
        return {"pastelid": pastelid, "pastelid_data": data}
