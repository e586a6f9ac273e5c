"""
Core utilities — exceptions and cross-cutting concerns shared by
the RPC client, the transfer parser and the ingestion pipeline.
"""
