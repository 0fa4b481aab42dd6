"""
Commands - CLI command implementations for pastel-rpc.

Each module groups related top-level commands:
- call:       Raw JSON-RPC call
- chain:      Block height, blocks, balances, transactions, health
- pastelid:   PastelID signature verification and username lookups
- supernodes: Supernode list and lookups
- tickets:    Ticket lookups
- settings:   Show (and persist) resolved RPC settings
"""
