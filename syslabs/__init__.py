"""Operating-systems tools: a virtual memory simulator, lottery and priority schedulers, workloads, and process, signal, IPC and threading demonstrations."""

__version__ = "0.1.0"