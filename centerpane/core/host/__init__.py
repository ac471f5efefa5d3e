from centerpane.core.host.ipc import DeadWindowError, HostIPC

__all__ = ["DeadWindowError", "HostIPC"]
