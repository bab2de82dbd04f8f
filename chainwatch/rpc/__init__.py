"""RPC endpoint health tracking and failover."""
from .failover import FailoverRunner
from .health import ERRORED, UNKNOWN, Latency, LatencyState, RPCHealthRecord, RPCHealthRegistry
from .prioritizer import prioritize_endpoints

__all__ = [
    "ERRORED",
    "UNKNOWN",
    "FailoverRunner",
    "Latency",
    "LatencyState",
    "RPCHealthRecord",
    "RPCHealthRegistry",
    "prioritize_endpoints",
]
