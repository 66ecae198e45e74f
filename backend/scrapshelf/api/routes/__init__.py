"""HTTP routes: health probes and the batched RPC endpoint."""
