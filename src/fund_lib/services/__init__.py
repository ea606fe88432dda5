"""
fund_lib.services — I/O-facing services: batch retrieval, the per-day
analysis cache, the Eastmoney client, the tracker facade and the JSON API.
"""
