"""Display-independent core of a scrollable-tiling compositor: configuration, KDL,
key bindings, animations, frame timing, cursors, IPC messages and monitor state."""

__version__ = "0.1.0"