"""
Proxy - Resilient JSON-RPC call engine for pasteld.

Request framing (codec), one-shot HTTP delivery (transport), the
retry/backoff state machine (retry) and the engine that ties them
together behind ``AsyncAuthServiceProxy.call`` (engine).

Uses httpx.AsyncClient so that network waits and backoff sleeps are
plain ``await`` points.
"""
