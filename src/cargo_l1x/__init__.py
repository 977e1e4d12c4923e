"""cargo-l1x: build and scaffold L1X eBPF smart contracts."""

__version__ = "0.1.0"
